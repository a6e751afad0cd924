"""In-memory stand-ins for the Playwright page and renderer used in tests."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from site_exporter.errors import RenderError
from site_exporter.jobs.models import ExportJob, JobOptions


def html_page(*hrefs: str) -> str:
    """Build a small HTML page linking to the given hrefs."""
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><body>{anchors}</body></html>"


class FakeSite:
    """A website described as URL -> HTML, plus failure and size overrides."""

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        timeouts: Iterable[str] = (),
        redirects: Optional[Dict[str, str]] = None,
        sizes: Optional[Dict[str, Dict[str, int]]] = None,
    ) -> None:
        self.pages = pages or {}
        self.timeouts = set(timeouts)
        self.redirects = redirects or {}
        self.sizes = sizes or {}


class FakePage:
    """Implements the subset of playwright's Page the exporter uses."""

    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.url = "about:blank"
        self.viewport: Optional[Dict[str, int]] = None
        self.viewports: List[Dict[str, int]] = []
        self.clips: List[Dict[str, int]] = []

    async def set_viewport_size(self, size: Dict[str, int]) -> None:
        self.viewport = dict(size)
        self.viewports.append(dict(size))

    async def pdf(self, **kwargs) -> bytes:
        return f"%PDF-1.4 {self.url}".encode()

    async def content(self) -> str:
        return self.site.pages.get(self.url, "<html></html>")

    async def evaluate(self, script: str) -> Dict[str, int]:
        return dict(self.site.sizes.get(self.url, {"width": 1280, "height": 2000}))

    async def screenshot(self, **kwargs) -> bytes:
        clip = kwargs["clip"]
        self.clips.append(dict(clip))
        return f"PNG {self.url} y={clip['y']} h={clip['height']}".encode()


class FakeRenderer:
    """Renderer double that records navigation instead of driving a browser."""

    def __init__(
        self,
        site: FakeSite,
        on_navigate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.site = site
        self.on_navigate = on_navigate
        self.navigated: List[str] = []
        self.started = False
        self.stopped = False
        self.page: Optional[FakePage] = None

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def new_page(self) -> FakePage:
        self.page = FakePage(self.site)
        return self.page

    async def navigate(self, page: FakePage, url: str) -> str:
        self.navigated.append(url)
        if self.on_navigate:
            self.on_navigate(url)
        if url in self.site.timeouts:
            raise RenderError(url, "navigation timed out after 15000ms")
        page.url = self.site.redirects.get(url, url)
        return page.url


def make_job(seed_url: str, job_id: str = "test", **options) -> ExportJob:
    """Create a job with validated options."""
    return ExportJob(
        job_id=job_id,
        seed_url=seed_url,
        options=JobOptions(**options).validate(),
    )
