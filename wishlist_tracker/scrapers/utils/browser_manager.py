"""Playwright browser lifecycle for dynamic page rendering.

Every render gets a fresh browser, context and page that are torn down on
exit, so no state leaks between product pages.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import structlog
from playwright.async_api import Page, async_playwright

from wishlist_tracker.config import settings
from wishlist_tracker.scrapers.utils.user_agents import get_chrome_user_agent

logger = structlog.get_logger(__name__)


LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-gpu",
]

# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = { runtime: {} };
"""


class BrowserManager:
    """Launches headless Chromium with anti-detection settings.

    Args:
        headless: Run without a visible window
        playwright_factory: Callable returning a Playwright context manager
            (``async_playwright`` in production, a fake in tests)
    """

    def __init__(
        self,
        headless: bool = settings.BROWSER_HEADLESS,
        playwright_factory: Callable = async_playwright,
    ):
        self._headless = headless
        self._playwright_factory = playwright_factory
        self.logger = logger.bind(service="browser_manager")

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Open a fresh page; the browser is closed when the block exits."""
        playwright = await self._playwright_factory().start()
        browser = None
        context = None
        try:
            browser = await playwright.chromium.launch(
                headless=self._headless,
                args=LAUNCH_ARGS,
            )
            context = await browser.new_context(
                user_agent=get_chrome_user_agent(),
                viewport={"width": 1920, "height": 1080},
                locale="en-US",
            )
            await context.add_init_script(STEALTH_JS)
            page = await context.new_page()
            self.logger.debug("browser_page_opened", headless=self._headless)
            yield page
        finally:
            await self._close(context, "context")
            await self._close(browser, "browser")
            try:
                await playwright.stop()
            except Exception as e:
                self.logger.warning("playwright_stop_failed", error=str(e))

    async def _close(self, resource, name: str) -> None:
        if resource is None:
            return
        try:
            await resource.close()
        except Exception as e:
            self.logger.warning("browser_close_failed", resource=name, error=str(e))


# Singleton instance
_browser_manager: Optional[BrowserManager] = None


def get_browser_manager() -> BrowserManager:
    """Get the global BrowserManager singleton."""
    global _browser_manager
    if _browser_manager is None:
        _browser_manager = BrowserManager()
    return _browser_manager
