"""
Link discovery for rendered pages.

Uses BeautifulSoup to pull anchor targets out of the rendered DOM and keeps
the ones that stay on the job's origin.
"""

from typing import List

from bs4 import BeautifulSoup

from ..errors import LinkResolutionError
from ..utils.log import get_logger
from ..utils.paths import normalize_url, is_same_origin


# Link targets that never lead to another page
SKIPPED_PREFIXES = ('#', 'javascript:', 'mailto:', 'tel:', 'data:')


class LinkDiscoverer:
    """
    Extracts same-origin, traversable links from rendered HTML.
    """

    def __init__(self, origin: str):
        """
        Initialize the link discoverer.

        Args:
            origin: Job origin (scheme://host[:port]) links must belong to
        """
        self.origin = origin
        self.logger = get_logger("links")

    def discover(self, html: str, page_url: str) -> List[str]:
        """
        Extract traversable links from a page.

        Args:
            html: Rendered HTML content
            page_url: Final URL of the page, used to resolve relative hrefs

        Returns:
            Normalized same-origin URLs in document order, without duplicates
        """
        try:
            soup = BeautifulSoup(html, 'lxml')
        except Exception:
            # Fallback to html.parser if lxml fails
            soup = BeautifulSoup(html, 'html.parser')

        links: List[str] = []
        seen = set()

        for anchor in soup.find_all('a', href=True):
            href = anchor.get('href', '').strip()
            if not href or href.lower().startswith(SKIPPED_PREFIXES):
                continue

            try:
                url = self.resolve(href, page_url)
            except LinkResolutionError as e:
                self.logger.debug(str(e))
                continue

            if url in seen or not is_same_origin(url, self.origin):
                continue
            seen.add(url)
            links.append(url)

        self.logger.debug(f"Discovered {len(links)} links on {page_url}")
        return links

    def resolve(self, href: str, page_url: str) -> str:
        """
        Resolve an href to a normalized absolute URL.

        Raises:
            LinkResolutionError: If the href cannot be turned into an http(s) URL
        """
        try:
            url = normalize_url(href, page_url)
        except ValueError as e:
            raise LinkResolutionError(href, str(e)) from e
        if not url:
            raise LinkResolutionError(href, "not an http(s) URL")
        return url
