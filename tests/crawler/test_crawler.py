"""Traversal tests for SiteCrawler, driven through an in-memory renderer."""

from __future__ import annotations

import asyncio
import io
import threading
import time
import zipfile

from site_exporter.crawler.crawler import SiteCrawler
from site_exporter.errors import ArchiveWriteError
from site_exporter.export.archive import ArchiveStreamer
from site_exporter.jobs.models import JobStatus

from tests.fakes import FakeRenderer, FakeSite, html_page, make_job


ROOT = "http://x.test/"


def run_crawl(job, renderer, streamer=None):
    """Run a job to completion and return the archive entry names."""
    buffer = io.BytesIO()
    streamer = streamer or ArchiveStreamer(buffer)
    asyncio.run(SiteCrawler(job, renderer=renderer).run(streamer))
    if not job.archive_complete:
        return None
    buffer.seek(0)
    with zipfile.ZipFile(buffer) as archive:
        return archive.namelist()


class FailingStreamer(ArchiveStreamer):
    """Archive whose every append fails as if the disk were full."""

    def append(self, name, data):
        raise ArchiveWriteError(f"Failed to write {name}: No space left on device")


class TestChildrenTraversal:
    """Tests for breadth-first link following."""

    def test_exports_seed_and_same_origin_children(self) -> None:
        site = FakeSite({
            ROOT: html_page("/a", "/b", "https://other.test/c"),
            "http://x.test/a": html_page("/deeper"),
            "http://x.test/b": html_page("/"),
        })
        renderer = FakeRenderer(site)
        job = make_job(ROOT, max_depth=1, scope="children")

        names = run_crawl(job, renderer)

        assert names == ["index.pdf", "a.pdf", "b.pdf"]
        assert renderer.navigated == [ROOT, "http://x.test/a", "http://x.test/b"]
        assert job.status is JobStatus.COMPLETED
        assert job.pages_exported == 3
        assert job.artifacts_written == 3
        assert job.done

    def test_depth_limits_link_hops(self) -> None:
        site = FakeSite({
            ROOT: html_page("/a"),
            "http://x.test/a": html_page("/b"),
            "http://x.test/b": html_page("/c"),
        })
        job = make_job(ROOT, max_depth=2)

        assert run_crawl(job, FakeRenderer(site)) == ["index.pdf", "a.pdf", "b.pdf"]

    def test_no_page_exported_twice(self) -> None:
        site = FakeSite({
            ROOT: html_page("/a", "/b", "/a#section"),
            "http://x.test/a": html_page("/", "/b", "/a/"),
            "http://x.test/b": html_page("/a", "/"),
        })
        renderer = FakeRenderer(site)

        names = run_crawl(make_job(ROOT, max_depth=3), renderer)

        assert names == ["index.pdf", "a.pdf", "b.pdf"]
        assert len(renderer.navigated) == len(set(renderer.navigated))

    def test_page_cap(self) -> None:
        site = FakeSite({ROOT: html_page("/a", "/b", "/c")})
        renderer = FakeRenderer(site)

        names = run_crawl(make_job(ROOT, max_pages=2), renderer)

        assert names == ["index.pdf", "a.pdf"]
        assert renderer.navigated == [ROOT, "http://x.test/a"]

    def test_colliding_names_get_suffix(self) -> None:
        site = FakeSite({ROOT: html_page("/a/b", "/a_b")})

        names = run_crawl(make_job(ROOT, max_depth=1), FakeRenderer(site))

        assert names == ["index.pdf", "a_b.pdf", "a_b_2.pdf"]

    def test_renderer_started_and_stopped(self) -> None:
        renderer = FakeRenderer(FakeSite({ROOT: html_page()}))

        run_crawl(make_job(ROOT), renderer)

        assert renderer.started
        assert renderer.stopped


class TestScopeModes:
    """Tests for the only, parents and both scopes."""

    def test_only_exports_just_the_seed(self) -> None:
        site = FakeSite({"http://x.test/a": html_page("/b", "/c")})
        renderer = FakeRenderer(site)

        names = run_crawl(make_job("http://x.test/a", scope="only"), renderer)

        assert names == ["a.pdf"]
        assert renderer.navigated == ["http://x.test/a"]

    def test_parents_exports_ancestors_root_first(self) -> None:
        site = FakeSite({
            ROOT: html_page("/other"),
            "http://x.test/a/b": html_page("/a/b/child"),
        })
        renderer = FakeRenderer(site)

        names = run_crawl(make_job("http://x.test/a/b", scope="parents"), renderer)

        assert names == ["index.pdf", "a.pdf", "a_b.pdf"]
        assert renderer.navigated == [ROOT, "http://x.test/a", "http://x.test/a/b"]

    def test_both_follows_links_from_seed_only(self) -> None:
        site = FakeSite({
            ROOT: html_page("/elsewhere"),
            "http://x.test/a": html_page("/a/c"),
            "http://x.test/a/c": html_page("/a/c/d"),
        })

        names = run_crawl(make_job("http://x.test/a", scope="both", max_depth=1), FakeRenderer(site))

        assert names == ["index.pdf", "a.pdf", "a_c.pdf"]


class TestFailures:
    """Tests for per-page failures and fatal archive errors."""

    def test_timed_out_page_is_skipped(self) -> None:
        site = FakeSite(
            {ROOT: html_page("/a", "/b")},
            timeouts=["http://x.test/a"],
        )
        job = make_job(ROOT)

        names = run_crawl(job, FakeRenderer(site))

        assert names == ["index.pdf", "b.pdf"]
        assert job.status is JobStatus.COMPLETED
        assert job.pages_failed == 1
        assert job.errors[0]["url"] == "http://x.test/a"
        assert job.errors[0]["type"] == "render_error"
        assert "skipped" in job.message

    def test_off_site_redirect_is_skipped(self) -> None:
        site = FakeSite(
            {ROOT: html_page("/a", "/b")},
            redirects={"http://x.test/a": "https://other.test/landing"},
        )
        job = make_job(ROOT)

        names = run_crawl(job, FakeRenderer(site))

        assert names == ["index.pdf", "b.pdf"]
        assert job.pages_failed == 1
        assert "other.test" in job.errors[0]["error"]

    def test_archive_failure_fails_job(self) -> None:
        renderer = FakeRenderer(FakeSite({ROOT: html_page("/a")}))
        job = make_job(ROOT)

        result = run_crawl(job, renderer, streamer=FailingStreamer(io.BytesIO()))

        assert result is None
        assert job.status is JobStatus.FAILED
        assert not job.archive_complete
        assert renderer.navigated == [ROOT]
        assert renderer.stopped
        assert job.errors[-1]["type"] == "job_error"


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancel_during_export_discards_page(self) -> None:
        site = FakeSite({ROOT: html_page("/a", "/b")})
        job = make_job(ROOT)

        def cancel_on_a(url: str) -> None:
            if url == "http://x.test/a":
                job.cancel()

        renderer = FakeRenderer(site, on_navigate=cancel_on_a)
        names = run_crawl(job, renderer)

        assert names == ["index.pdf"]
        assert renderer.navigated == [ROOT, "http://x.test/a"]
        assert job.status is JobStatus.CANCELLED
        assert job.archive_complete

    def test_cancel_before_start_gives_empty_archive(self) -> None:
        renderer = FakeRenderer(FakeSite({ROOT: html_page("/a")}))
        job = make_job(ROOT)
        job.cancel()

        names = run_crawl(job, renderer)

        assert names == []
        assert renderer.navigated == []
        assert job.status is JobStatus.CANCELLED


class TestScreenshotMode:
    """Tests for tiled screenshot exports."""

    def test_tiles_named_in_order(self) -> None:
        site = FakeSite(
            {ROOT: html_page("/a")},
            sizes={ROOT: {"width": 1280, "height": 2500}},
        )
        renderer = FakeRenderer(site)
        job = make_job(ROOT, scope="only", export_mode="screenshot", resolution=1280)

        buffer = io.BytesIO()
        asyncio.run(SiteCrawler(job, renderer=renderer).run(ArchiveStreamer(buffer)))

        buffer.seek(0)
        with zipfile.ZipFile(buffer) as archive:
            assert archive.namelist() == ["index_part0.png", "index_part1.png", "index_part2.png"]
            assert archive.read("index_part2.png") == b"PNG http://x.test/ y=2246 h=254"

        assert job.artifacts_written == 3
        assert job.pages_exported == 1


class TestPageDelay:
    """Tests for the delay between page exports."""

    def test_delay_between_pages(self) -> None:
        site = FakeSite({ROOT: html_page("/a")})
        job = make_job(ROOT, max_depth=1, page_delay_ms=200)

        started = time.monotonic()
        names = run_crawl(job, FakeRenderer(site))

        assert names == ["index.pdf", "a.pdf"]
        assert time.monotonic() - started >= 0.2

    def test_cancel_interrupts_delay(self) -> None:
        site = FakeSite({ROOT: html_page("/a", "/b")})
        job = make_job(ROOT, page_delay_ms=3000)
        timers = []

        def cancel_soon(url: str) -> None:
            if url == ROOT:
                timer = threading.Timer(0.1, job.cancel)
                timers.append(timer)
                timer.start()

        started = time.monotonic()
        names = run_crawl(job, FakeRenderer(site, on_navigate=cancel_soon))
        elapsed = time.monotonic() - started
        for timer in timers:
            timer.join()

        assert names == ["index.pdf"]
        assert job.status is JobStatus.CANCELLED
        assert elapsed < 1.5
