"""
Page exporter.

Turns one URL into archive artifacts: a single A4 PDF, or a top-to-bottom
series of PNG tiles covering the whole rendered page.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

from playwright.async_api import Error as PlaywrightError, Page

from .tiling import TilePlan, plan_tiles
from ..errors import InvalidInput, RenderError
from ..utils.log import get_logger
from ..utils.paths import url_to_page_name
from ..utils.constants import DEFAULT_RESOLUTION, DEFAULT_VIEWPORT, PDF_FORMAT


# Full scrollable size of the rendered document
SCROLL_SIZE_SCRIPT = """
() => {
    const doc = document.documentElement;
    const body = document.body || doc;
    return {
        width: Math.max(doc.scrollWidth, body.scrollWidth, 1),
        height: Math.max(doc.scrollHeight, body.scrollHeight, 1)
    };
}
"""


class ExportMode(str, Enum):
    """Output format for exported pages."""

    PDF = "pdf"
    SCREENSHOT = "screenshot"

    @classmethod
    def parse(cls, value) -> "ExportMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInput(f"Unknown export mode {value!r} (expected pdf or screenshot)") from None


@dataclass
class ExportArtifact:
    """One named file destined for the archive."""

    name: str
    data: bytes


@dataclass
class PageExport:
    """Artifacts produced for one page."""

    url: str
    name: str
    final_url: Optional[str] = None
    artifacts: List[ExportArtifact] = field(default_factory=list)
    plan: Optional[TilePlan] = None


class PageNameAllocator:
    """
    Hands out unique page base names within a job.

    Different URLs can derive the same name ('/a/b' and '/a_b'); later ones
    get a numeric suffix. The same URL always gets the same name.
    """

    def __init__(self):
        self._by_url: Dict[str, str] = {}
        self._taken: Set[str] = set()

    def name_for(self, url: str) -> str:
        if url in self._by_url:
            return self._by_url[url]

        base = url_to_page_name(url)
        name = base
        counter = 2
        while name in self._taken:
            name = f"{base}_{counter}"
            counter += 1

        self._taken.add(name)
        self._by_url[url] = name
        return name


def tile_name(page_name: str, index: int) -> str:
    return f"{page_name}_part{index}.png"


class PageExporter:
    """
    Drives the renderer to export single pages.
    """

    def __init__(
        self,
        renderer,
        mode: ExportMode = ExportMode.PDF,
        resolution: int = DEFAULT_RESOLUTION
    ):
        """
        Initialize the page exporter.

        Args:
            renderer: PageRenderer used for navigation
            mode: Export format
            resolution: Target viewport width for screenshot tiles
        """
        self.renderer = renderer
        self.mode = ExportMode.parse(mode)
        self.resolution = resolution
        self.logger = get_logger("exporter")

    async def export(self, page: Page, url: str, name: str) -> PageExport:
        """
        Export one URL.

        Args:
            page: Page to render through
            url: URL to export
            name: Unique base name for the page's artifacts

        Returns:
            PageExport with all artifacts in archive order

        Raises:
            RenderError: If navigation or capture fails
        """
        if self.mode is ExportMode.SCREENSHOT:
            return await self._export_tiles(page, url, name)
        return await self._export_pdf(page, url, name)

    async def _export_pdf(self, page: Page, url: str, name: str) -> PageExport:
        final_url = await self.renderer.navigate(page, url)
        try:
            data = await page.pdf(format=PDF_FORMAT, print_background=True)
        except PlaywrightError as e:
            raise RenderError(url, f"PDF rendering failed: {e}") from e

        self.logger.debug(f"Rendered PDF for {url} ({len(data)} bytes)")
        return PageExport(
            url=url,
            name=name,
            final_url=final_url,
            artifacts=[ExportArtifact(f"{name}.pdf", data)],
        )

    async def _export_tiles(self, page: Page, url: str, name: str) -> PageExport:
        # Measure at the standard viewport, not whatever the last page left
        await page.set_viewport_size(dict(DEFAULT_VIEWPORT))
        final_url = await self.renderer.navigate(page, url)

        try:
            size = await page.evaluate(SCROLL_SIZE_SCRIPT)
            plan = plan_tiles(size["width"], size["height"], self.resolution)

            await page.set_viewport_size({
                "width": plan.viewport_width,
                "height": plan.viewport_height,
            })

            artifacts = []
            for index, (y, height) in enumerate(plan.tiles):
                data = await page.screenshot(
                    type="png",
                    full_page=True,
                    clip={"x": 0, "y": y, "width": plan.viewport_width, "height": height},
                )
                artifacts.append(ExportArtifact(tile_name(name, index), data))
        except PlaywrightError as e:
            raise RenderError(url, f"screenshot capture failed: {e}") from e

        self.logger.debug(
            f"Captured {len(artifacts)} tiles for {url} "
            f"({plan.viewport_width}x{plan.viewport_height}, tile {plan.tile_height}px)"
        )
        return PageExport(
            url=url,
            name=name,
            final_url=final_url,
            artifacts=artifacts,
            plan=plan,
        )
