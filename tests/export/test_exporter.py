"""Unit tests for single-page exports."""

from __future__ import annotations

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from site_exporter.errors import InvalidInput, RenderError
from site_exporter.export.exporter import (
    ExportMode,
    PageExporter,
    PageNameAllocator,
    tile_name,
)
from site_exporter.utils.constants import DEFAULT_VIEWPORT

from tests.fakes import FakePage, FakeRenderer, FakeSite


URL = "http://x.test/docs"


class BrokenPdfPage(FakePage):
    async def pdf(self, **kwargs) -> bytes:
        raise PlaywrightError("Printing failed")


def export(exporter: PageExporter, page: FakePage, url: str = URL, name: str = "docs"):
    return asyncio.run(exporter.export(page, url, name))


class TestExportMode:
    def test_parse(self) -> None:
        assert ExportMode.parse("PDF") is ExportMode.PDF
        assert ExportMode.parse("screenshot") is ExportMode.SCREENSHOT

    def test_parse_unknown(self) -> None:
        with pytest.raises(InvalidInput):
            ExportMode.parse("html")


class TestPageNameAllocator:
    """Tests for unique page naming within a job."""

    def test_same_url_same_name(self) -> None:
        names = PageNameAllocator()
        assert names.name_for("http://x.test/a") == "a"
        assert names.name_for("http://x.test/a") == "a"

    def test_collisions_numbered(self) -> None:
        names = PageNameAllocator()
        assert names.name_for("http://x.test/a/b") == "a_b"
        assert names.name_for("http://x.test/a_b") == "a_b_2"
        assert names.name_for("http://x.test/a.b") == "a_b_3"

    def test_tile_name(self) -> None:
        assert tile_name("index", 0) == "index_part0.png"


class TestPageExporter:
    """Tests for PDF and screenshot exports."""

    def test_pdf_export(self) -> None:
        site = FakeSite()
        renderer = FakeRenderer(site)
        page = FakePage(site)

        result = export(PageExporter(renderer, mode="pdf"), page)

        assert [a.name for a in result.artifacts] == ["docs.pdf"]
        assert result.artifacts[0].data.startswith(b"%PDF")
        assert result.final_url == URL
        assert renderer.navigated == [URL]

    def test_screenshot_export_scales_to_resolution(self) -> None:
        site = FakeSite(sizes={URL: {"width": 2560, "height": 4000}})
        page = FakePage(site)

        result = export(PageExporter(FakeRenderer(site), mode="screenshot", resolution=1280), page)

        assert [a.name for a in result.artifacts] == [
            "docs_part0.png",
            "docs_part1.png",
            "docs_part2.png",
            "docs_part3.png",
        ]
        assert page.viewports == [DEFAULT_VIEWPORT, {"width": 1280, "height": 2000}]
        assert [clip["height"] for clip in page.clips] == [562, 562, 562, 314]
        assert all(clip["width"] == 1280 for clip in page.clips)

    def test_navigation_failure_propagates(self) -> None:
        site = FakeSite(timeouts=[URL])

        with pytest.raises(RenderError):
            export(PageExporter(FakeRenderer(site)), FakePage(site))

    def test_capture_failure_becomes_render_error(self) -> None:
        site = FakeSite()

        with pytest.raises(RenderError) as exc_info:
            export(PageExporter(FakeRenderer(site)), BrokenPdfPage(site))

        assert exc_info.value.url == URL
        assert "Printing failed" in exc_info.value.reason
