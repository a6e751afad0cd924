"""
Main site crawler module.

Runs the breadth-first traversal of one export job: seeds the frontier from
the scope mode, exports each page, follows same-origin links and streams
the artifacts into the job's archive.
"""

import asyncio
from typing import Optional

from playwright.async_api import Error as PlaywrightError, Page

from .frontier import FrontierQueue
from .links import LinkDiscoverer
from .renderer import PageRenderer
from .scope import FrontierEntry, build_frontier
from ..errors import ArchiveWriteError, RenderError
from ..export.archive import ArchiveStreamer
from ..export.exporter import PageExporter, PageNameAllocator
from ..jobs.models import ExportJob, JobStatus
from ..utils.constants import CANCEL_POLL_INTERVAL
from ..utils.log import get_logger
from ..utils.paths import is_same_origin
from ..utils.robots import RobotsHandler


class SiteCrawler:
    """
    Drives one export job from seed to finalized archive.

    The traversal is strictly sequential: one page is rendered, captured and
    archived before the next is dequeued. Cancellation is observed before
    and after every export.
    """

    def __init__(
        self,
        job: ExportJob,
        renderer: Optional[PageRenderer] = None,
        headless: bool = True
    ):
        """
        Initialize the site crawler.

        Args:
            job: Job to run; its options drive the traversal
            renderer: Renderer to use (a headless Playwright one by default)
            headless: Run the default renderer's browser headless
        """
        self.job = job
        self.options = job.options
        self.renderer = renderer or PageRenderer(
            timeout=self.options.timeout_ms,
            headless=headless
        )
        self.exporter = PageExporter(
            self.renderer,
            mode=self.options.export_mode,
            resolution=self.options.resolution
        )
        self.discoverer = LinkDiscoverer(job.origin)
        self.robots = RobotsHandler(job.origin) if self.options.respect_robots else None
        self.names = PageNameAllocator()
        self.delay = self.options.page_delay_ms / 1000.0
        self.frontier: Optional[FrontierQueue] = None
        self.logger = get_logger("crawler")

    async def run(self, streamer: ArchiveStreamer) -> ExportJob:
        """
        Run the job to a terminal state.

        The archive is always finalized unless writing to it is what failed.
        Faults never escape; they leave the job in the FAILED state.

        Args:
            streamer: Archive receiving the job's artifacts

        Returns:
            The job, in a terminal state
        """
        job = self.job
        job.status = JobStatus.RUNNING
        job.message = "Crawling pages..."
        job.log(f"Base origin: {job.origin}")
        job.log(f"Depth: {self.options.max_depth}, scope: {self.options.scope.value}, "
                f"mode: {self.options.export_mode.value}")

        failure: Optional[Exception] = None
        try:
            self.frontier = FrontierQueue(build_frontier(job.seed_url, self.options.scope))

            if self.robots:
                await self.robots.load()
                self.delay = max(self.delay, self.robots.get_crawl_delay(self.delay))

            await self.renderer.start()
            try:
                page = await self.renderer.new_page()
                await self._crawl_pages(page, streamer)
            finally:
                await self.renderer.stop()
        except Exception as e:
            self.logger.error(f"Job {job.job_id} failed: {e}")
            failure = e

        if not streamer.finalized and not isinstance(failure, ArchiveWriteError):
            job.log("Creating ZIP archive...")
            try:
                streamer.finalize()
                job.archive_complete = True
            except ArchiveWriteError as e:
                self.logger.error(f"Job {job.job_id} could not finalize archive: {e}")
                failure = failure or e

        if failure is not None:
            job.record_error(job.seed_url, str(failure), 'job_error')
            job.finish(JobStatus.FAILED, f"Failed: {failure}")
        elif job.cancelled:
            job.finish(
                JobStatus.CANCELLED,
                f"Cancelled after {job.pages_exported} pages"
            )
        else:
            job.finish(
                JobStatus.COMPLETED,
                f"Completed: {job.pages_exported} pages, {job.artifacts_written} files"
                + (f", {job.pages_failed} skipped" if job.pages_failed else "")
            )

        self.logger.info(f"Job {job.job_id}: {job.message}")
        return job

    async def _crawl_pages(self, page: Page, streamer: ArchiveStreamer) -> None:
        """Export pages in breadth-first order until a stop condition holds."""
        frontier = self.frontier

        while frontier and len(frontier.visited) < self.options.max_pages:
            if self.job.cancelled:
                self.job.log("Cancellation requested, stopping")
                return

            entry = frontier.pop()

            if frontier.is_visited(entry.url):
                continue

            if not is_same_origin(entry.url, self.job.origin):
                self.logger.debug(f"Skipping off-origin URL: {entry.url}")
                continue

            if self.robots and not self.robots.is_allowed(entry.url):
                self.job.log(f"Skipped (robots.txt): {entry.url}")
                continue

            frontier.mark_visited(entry.url)
            await self._export_entry(page, entry, streamer)

            if self.delay and frontier:
                await self._pause()

        self.logger.info(f"Visited {len(frontier.visited)} pages")

    async def _pause(self) -> None:
        """Wait out the inter-page delay, returning early once cancelled."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.delay
        while not self.job.cancelled:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            await asyncio.sleep(min(remaining, CANCEL_POLL_INTERVAL))

    async def _export_entry(
        self,
        page: Page,
        entry: FrontierEntry,
        streamer: ArchiveStreamer
    ) -> None:
        """
        Export one page and queue its links.

        A render failure is recorded and the page skipped. If the job was
        cancelled while the page rendered, its artifacts are dropped.
        """
        job = self.job
        name = self.names.name_for(entry.url)

        self.logger.info(
            f"[{len(self.frontier.visited)}/{self.options.max_pages}] Exporting: {entry.url}"
        )
        job.log(f"[{entry.depth}/{self.options.max_depth}] {entry.url}")

        try:
            result = await self.exporter.export(page, entry.url, name)
            if result.final_url and not is_same_origin(result.final_url, job.origin):
                raise RenderError(entry.url, f"redirected off-site to {result.final_url}")
        except RenderError as e:
            job.pages_failed += 1
            job.record_error(entry.url, e.reason, 'render_error')
            job.log(f"Skipped: {entry.url} - {e.reason}")
            self.logger.warning(f"Skipping {entry.url}: {e.reason}")
            return

        if job.cancelled:
            job.log(f"Discarded (cancelled during export): {entry.url}")
            return

        for artifact in result.artifacts:
            streamer.append(artifact.name, artifact.data)
            job.artifacts_written += 1

        job.pages_exported += 1
        job.message = f"Exported {job.pages_exported} pages"
        job.log(f"Saved: {', '.join(a.name for a in result.artifacts)}")

        if entry.expandable and entry.hops < self.options.max_depth:
            await self._enqueue_links(page, entry, result.final_url or entry.url)

    async def _enqueue_links(self, page: Page, entry: FrontierEntry, page_url: str) -> None:
        """Queue the unvisited same-origin links of the current page."""
        try:
            html = await page.content()
        except PlaywrightError as e:
            self.logger.warning(f"Could not read links from {page_url}: {e}")
            return

        added = 0
        for link in self.discoverer.discover(html, page_url):
            queued = self.frontier.push(
                FrontierEntry(
                    link,
                    entry.depth + 1,
                    hops=entry.hops + 1,
                    expandable=True,
                )
            )
            added += int(queued)

        self.logger.debug(f"Queued {added} new links from {page_url}")
