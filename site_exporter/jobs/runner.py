"""
Background execution and delivery of export jobs.

Each job runs on its own daemon thread with a private asyncio event loop and
browser. Its archive is spooled into a per-job scratch directory, from which
it can be streamed to a client while the crawl is still running.
"""

import asyncio
import os
import threading
import time
from typing import Callable, Iterator, List, Optional, Set

from .models import ExportJob, JobOptions, JobStatus
from .registry import JobRegistry
from ..crawler.crawler import SiteCrawler
from ..crawler.scope import validate_seed
from ..errors import ArchiveWriteError, DownloadInProgress, JobNotFound
from ..export.archive import ArchiveStreamer, SpoolWriter, iter_spool
from ..utils.constants import ARCHIVE_FILENAME, JOB_RETENTION_SECONDS
from ..utils.log import get_logger
from ..utils.paths import ensure_dir, job_scratch_dir, remove_dir


class JobManager:
    """
    Starts, cancels and delivers export jobs.
    """

    def __init__(
        self,
        registry: Optional[JobRegistry] = None,
        scratch_root: Optional[str] = None,
        renderer_factory: Optional[Callable[[ExportJob], object]] = None,
        retention_seconds: float = JOB_RETENTION_SECONDS
    ):
        """
        Initialize the job manager.

        Args:
            registry: Job registry (a fresh one by default)
            scratch_root: Directory under which per-job scratch dirs are made
            renderer_factory: Builds the renderer for a job; the crawler's
                default Playwright renderer is used when omitted
            retention_seconds: How long an uncollected finished job is kept
        """
        self.registry = registry or JobRegistry()
        self.scratch_root = scratch_root
        self.renderer_factory = renderer_factory
        self.retention_seconds = retention_seconds
        self.logger = get_logger("jobs")

        self._lock = threading.Lock()
        self._downloading: Set[str] = set()

    def start_job(self, seed_url: str, options: Optional[JobOptions] = None) -> str:
        """
        Validate a request and start its job in the background.

        Args:
            seed_url: URL to start crawling from
            options: Job options (defaults when omitted)

        Returns:
            The new job id

        Raises:
            InvalidInput: If the seed URL or an option is invalid
        """
        options = (options or JobOptions()).validate()
        seed = validate_seed(seed_url)
        self.purge_expired()

        job_id = self.registry.new_id()
        scratch_dir = job_scratch_dir(job_id, self.scratch_root)
        remove_dir(scratch_dir)
        ensure_dir(scratch_dir)

        job = ExportJob(job_id=job_id, seed_url=seed, options=options, scratch_dir=scratch_dir)
        job.log("Job started...")
        self.registry.add(job)

        thread = threading.Thread(
            target=self._run_job,
            args=(job,),
            name=f"export-{job_id}",
            daemon=True
        )
        thread.start()

        self.logger.info(f"Started job {job_id} for {seed}")
        return job_id

    def archive_path(self, job: ExportJob) -> str:
        return os.path.join(job.scratch_dir, ARCHIVE_FILENAME)

    def _run_job(self, job: ExportJob) -> None:
        """Run a job to completion on the current (background) thread."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            writer = SpoolWriter(self.archive_path(job))
            try:
                streamer = ArchiveStreamer(writer)
                renderer = self.renderer_factory(job) if self.renderer_factory else None
                crawler = SiteCrawler(job, renderer=renderer)
                loop.run_until_complete(crawler.run(streamer))
            finally:
                writer.close()
        except Exception as e:
            self.logger.error(f"Job {job.job_id} crashed: {e}")
            job.record_error(job.seed_url, str(e), 'job_error')
            if not job.done:
                job.finish(JobStatus.FAILED, f"Failed: {e}")
        finally:
            loop.close()
            # Discarded while running: nobody is left to clean up after us
            if job.job_id not in self.registry:
                remove_dir(job.scratch_dir)

    def get_job(self, job_id: str) -> ExportJob:
        """
        Raises:
            JobNotFound: If the id is unknown
        """
        return self.registry.get(job_id)

    def list_jobs(self) -> List[ExportJob]:
        return self.registry.all()

    def cancel_job(self, job_id: str) -> ExportJob:
        """
        Request cooperative cancellation of a job. Idempotent.

        Raises:
            JobNotFound: If the id is unknown
        """
        job = self.registry.get(job_id)
        if not job.cancelled and not job.done:
            job.log("Cancellation requested by user")
            job.message = "Cancelling..."
        job.cancel()
        return job

    def wait(self, job_id: str, timeout: Optional[float] = None) -> bool:
        """Block until a job is done; returns False on timeout."""
        return self.registry.get(job_id).done_event.wait(timeout)

    def stream_result(self, job_id: str) -> "ArchiveDownload":
        """
        Stream a job's archive.

        The job id is checked immediately; the returned iterator then follows
        the archive as it grows. After full delivery the job and its scratch
        files are removed. Only one download per job runs at a time.

        Raises:
            JobNotFound: If the id is unknown
            DownloadInProgress: If the archive is already being streamed
        """
        job = self.registry.get(job_id)
        with self._lock:
            if job_id in self._downloading:
                raise DownloadInProgress(job_id)
            self._downloading.add(job_id)
        return ArchiveDownload(self._stream(job), lambda: self._release(job_id))

    def _release(self, job_id: str) -> None:
        with self._lock:
            self._downloading.discard(job_id)

    def _stream(self, job: ExportJob) -> Iterator[bytes]:
        yield from iter_spool(self.archive_path(job), job.done_event)

        if not job.archive_complete:
            # Headers are already out; all we can do is break the stream
            raise ArchiveWriteError(f"Archive for job {job.job_id} is incomplete")

        self.logger.info(f"Delivered archive for job {job.job_id}")
        try:
            self.discard_job(job.job_id)
        except JobNotFound:
            self.logger.debug(f"Job {job.job_id} was discarded during delivery")

    def purge_expired(self, now: Optional[float] = None) -> List[str]:
        """
        Discard finished jobs nobody collected within the retention period.

        Jobs whose archive is being downloaded are kept.

        Returns:
            Ids of the discarded jobs
        """
        now = time.time() if now is None else now
        with self._lock:
            busy = set(self._downloading)

        purged = []
        for job in self.registry.all():
            if not job.done or job.job_id in busy:
                continue
            if now - job.completed_at < self.retention_seconds:
                continue
            try:
                self.discard_job(job.job_id)
            except JobNotFound:
                continue
            purged.append(job.job_id)

        if purged:
            self.logger.info(f"Purged {len(purged)} expired jobs")
        return purged

    def discard_job(self, job_id: str) -> ExportJob:
        """
        Cancel a job if needed and release it and its scratch files.

        Raises:
            JobNotFound: If the id is unknown
        """
        job = self.registry.remove(job_id)
        job.cancel()
        if job.done:
            remove_dir(job.scratch_dir)
        return job


class ArchiveDownload:
    """
    One client's stream of a job archive.

    Holds the job's download slot until the stream is exhausted, fails or is
    closed. Werkzeug calls close() when the client goes away.
    """

    def __init__(self, chunks: Iterator[bytes], release: Callable[[], None]):
        self._chunks = chunks
        self._release = release

    def __iter__(self) -> "ArchiveDownload":
        return self

    def __next__(self) -> bytes:
        try:
            return next(self._chunks)
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        try:
            self._chunks.close()
        finally:
            self._release()
