"""Headless-browser page acquisition for client-side rendered sites."""

import asyncio
from typing import Optional, Tuple

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from wishlist_tracker.core.exceptions import (
    ConfigurationError,
    NetworkError,
    ScrapeTimeoutError,
)
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.scrapers.base import RenderConfig, SiteExtractor
from wishlist_tracker.scrapers.pipeline import extract_product
from wishlist_tracker.scrapers.static_scraper import raise_for_page_status
from wishlist_tracker.scrapers.utils.browser_manager import BrowserManager, get_browser_manager
from wishlist_tracker.scrapers.utils.rate_limiter import DomainRateLimiter

logger = structlog.get_logger(__name__)


class DynamicScraper:
    """Renders a product page in Chromium, then runs the extraction pipeline.

    Args:
        browser_manager: Browser lifecycle owner (global singleton by default)
        rate_limiter: Per-domain limiter; None disables throttling
    """

    def __init__(
        self,
        browser_manager: Optional[BrowserManager] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
    ):
        self.browser_manager = browser_manager or get_browser_manager()
        self.rate_limiter = rate_limiter
        self.logger = logger.bind(service="dynamic_scraper")

    async def _render(self, page: Page, url: str, render: RenderConfig) -> Tuple[str, str]:
        try:
            response = await page.goto(url, wait_until="load", timeout=render.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ScrapeTimeoutError(url) from e
        except PlaywrightError as e:
            raise NetworkError(str(e), url) from e

        if response is not None:
            raise_for_page_status(response.status, url)

        try:
            await page.wait_for_load_state("networkidle", timeout=render.timeout_ms)
        except PlaywrightTimeoutError:
            # Trackers and analytics beacons keep some pages from ever going idle
            self.logger.debug("network_idle_timeout", url=url)

        try:
            await page.wait_for_selector(render.wait_selector, timeout=render.timeout_ms)
        except PlaywrightTimeoutError as e:
            self.logger.warning(
                "render_selector_timeout",
                url=url,
                selector=render.wait_selector,
            )
            raise ScrapeTimeoutError(url) from e

        if render.settle_ms:
            await asyncio.sleep(render.settle_ms / 1000)

        if render.expand_selector:
            await self._expand(page, url, render)

        html = await page.content()
        # page.url reflects redirects and client-side navigation
        return html, page.url or url

    async def _expand(self, page: Page, url: str, render: RenderConfig) -> None:
        """Click an element that reveals more product data; absence is not an error."""
        try:
            element = await page.query_selector(render.expand_selector)
            if element is None:
                self.logger.debug("expand_element_missing", url=url)
                return
            await element.click()
            await asyncio.sleep(render.expand_wait_ms / 1000)
        except PlaywrightError as e:
            self.logger.warning("expand_click_failed", url=url, error=str(e))

    async def scrape(self, url: str, extractor: SiteExtractor) -> ScrapedProduct:
        """Render and extract a product page.

        Args:
            url: Product page URL
            extractor: Site capability set with a render config

        Returns:
            Scraped product whose ``url`` is the rendered page's final URL

        Raises:
            ConfigurationError: If the extractor has no render config
            TransportError: Classified navigation or render failure
        """
        render = extractor.render
        if render is None:
            raise ConfigurationError(
                f"Extractor {extractor.name} has no render config for dynamic scraping"
            )

        if self.rate_limiter:
            await self.rate_limiter.acquire_for_url(url)

        self.logger.info("rendering_page", url=url, site=extractor.name)
        async with self.browser_manager.open_page() as page:
            html, final_url = await self._render(page, url, render)

        return extract_product(html, final_url, extractor)
