"""Unit tests for link discovery."""

from __future__ import annotations

import pytest

from site_exporter.crawler.links import LinkDiscoverer
from site_exporter.errors import LinkResolutionError


@pytest.fixture
def discoverer() -> LinkDiscoverer:
    return LinkDiscoverer("http://x.test")


class TestLinkDiscoverer:
    """Tests for LinkDiscoverer.discover."""

    def test_same_origin_links_only(self, discoverer: LinkDiscoverer) -> None:
        html = """
        <a href="/a">A</a>
        <a href="http://x.test/b">B</a>
        <a href="https://other.test/c">external</a>
        <a href="http://x.test.evil.net/d">lookalike</a>
        <a href="https://x.test/e">other scheme</a>
        """
        assert discoverer.discover(html, "http://x.test/") == [
            "http://x.test/a",
            "http://x.test/b",
        ]

    def test_skips_fragments_and_pseudo_links(self, discoverer: LinkDiscoverer) -> None:
        html = """
        <a href="">empty</a>
        <a href="#top">fragment</a>
        <a href="mailto:me@x.test">mail</a>
        <a href="JavaScript:void(0)">js</a>
        <a>no href</a>
        <a href="/ok">ok</a>
        """
        assert discoverer.discover(html, "http://x.test/") == ["http://x.test/ok"]

    def test_relative_links_resolve_against_page(self, discoverer: LinkDiscoverer) -> None:
        html = '<a href="child">c</a><a href="../up">u</a>'
        assert discoverer.discover(html, "http://x.test/docs/guide/") == [
            "http://x.test/docs/guide/child",
            "http://x.test/docs/up",
        ]

    def test_deduplicates_and_strips_fragments(self, discoverer: LinkDiscoverer) -> None:
        html = '<a href="/a">1</a><a href="/a#s">2</a><a href="/a/">3</a>'
        assert discoverer.discover(html, "http://x.test/") == ["http://x.test/a"]

    def test_unresolvable_link_is_dropped(self, discoverer: LinkDiscoverer) -> None:
        html = '<a href="http://x.test:bad/">bad</a><a href="/fine">fine</a>'
        assert discoverer.discover(html, "http://x.test/") == ["http://x.test/fine"]

    def test_resolve_raises_for_bad_href(self, discoverer: LinkDiscoverer) -> None:
        with pytest.raises(LinkResolutionError):
            discoverer.resolve("ftp://x.test/file", "http://x.test/")
