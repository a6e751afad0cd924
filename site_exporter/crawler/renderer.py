"""
Headless browser adapter.

Owns the Chromium instance of one export job and turns navigation failures
into RenderError.
"""

from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
)

from ..errors import RenderError
from ..utils.log import get_logger
from ..utils.constants import DEFAULT_USER_AGENT, DEFAULT_PAGE_TIMEOUT, DEFAULT_VIEWPORT


# Needed to run Chromium inside containers
CHROMIUM_ARGS = (
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
)


class PageRenderer:
    """
    Browser owner for a single export job.

    The job exports every page through one tab, so navigations never overlap.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_PAGE_TIMEOUT,
        wait_until: str = "networkidle",
        headless: bool = True,
        user_agent: Optional[str] = None
    ):
        """
        Args:
            timeout: Navigation budget per page in milliseconds
            wait_until: Load state that counts as rendered
            headless: Launch Chromium without a window
            user_agent: User agent override
        """
        self.timeout = timeout
        self.wait_until = wait_until
        self.headless = headless
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.logger = get_logger("renderer")

        self._driver: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    @property
    def running(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch Chromium. Does nothing if it is already running."""
        if self.running:
            return
        self._driver = await async_playwright().start()
        self._browser = await self._driver.chromium.launch(
            headless=self.headless,
            args=list(CHROMIUM_ARGS)
        )
        self.logger.info(f"Chromium launched (headless={self.headless})")

    async def stop(self) -> None:
        """Close the browser context, the browser and the driver, in that order."""
        context, browser, driver = self._context, self._browser, self._driver
        self._context = self._browser = self._driver = None

        if context:
            await context.close()
        if browser:
            await browser.close()
        if driver:
            await driver.stop()
        self.logger.info("Chromium closed")

    async def new_page(self) -> Page:
        """Open the tab the job renders through, launching Chromium if needed."""
        await self.start()
        if self._context is None:
            self._context = await self._browser.new_context(
                user_agent=self.user_agent,
                viewport=dict(DEFAULT_VIEWPORT),
                ignore_https_errors=True,
            )
        return await self._context.new_page()

    async def navigate(self, page: Page, url: str) -> str:
        """
        Load a URL and wait until it settles.

        Returns:
            The page's final URL, after redirects

        Raises:
            RenderError: On timeout, a failed navigation or an HTTP error status
        """
        self.logger.debug(f"Loading {url}")
        try:
            response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout)
        except PlaywrightTimeout:
            raise RenderError(url, f"navigation timed out after {self.timeout}ms") from None
        except PlaywrightError as e:
            raise RenderError(url, f"navigation failed: {e}") from e

        if response is None:
            raise RenderError(url, "no response")
        if response.status >= 400:
            raise RenderError(url, f"HTTP {response.status}")

        return page.url

    async def __aenter__(self) -> "PageRenderer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
