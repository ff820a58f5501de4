"""Scraper orchestration service.

Entry point for scraping a single product URL: resolves the site
extractor and routes the URL to the static or dynamic pipeline.
"""

from typing import Optional

import structlog

from wishlist_tracker.core.exceptions import ConfigurationError
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.scrapers.base import Site
from wishlist_tracker.scrapers.dynamic_scraper import DynamicScraper
from wishlist_tracker.scrapers.registry import ExtractorRegistry, get_extractor_registry
from wishlist_tracker.scrapers.static_scraper import StaticScraper
from wishlist_tracker.scrapers.utils.rate_limiter import DomainRateLimiter

logger = structlog.get_logger(__name__)


class ScraperService:
    """Routes product URLs to the right acquisition pipeline.

    Sites flagged for dynamic rendering go through the headless browser;
    everything else, including unknown sites, is fetched over plain HTTP.
    """

    def __init__(
        self,
        registry: Optional[ExtractorRegistry] = None,
        static_scraper: Optional[StaticScraper] = None,
        dynamic_scraper: Optional[DynamicScraper] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
    ):
        """Initialize scraper service.

        Args:
            registry: Extractor registry (global one by default)
            static_scraper: HTTP pipeline
            dynamic_scraper: Browser pipeline, created lazily on first dynamic URL
            rate_limiter: Shared per-domain limiter for pipelines created here
        """
        self.registry = registry or get_extractor_registry()
        self.rate_limiter = rate_limiter or DomainRateLimiter()
        self.static_scraper = static_scraper or StaticScraper(rate_limiter=self.rate_limiter)
        self._dynamic_scraper = dynamic_scraper
        self.logger = logger.bind(service="scraper_service")

    @property
    def dynamic_scraper(self) -> DynamicScraper:
        if self._dynamic_scraper is None:
            self._dynamic_scraper = DynamicScraper(rate_limiter=self.rate_limiter)
        return self._dynamic_scraper

    async def scrape(self, url: str) -> ScrapedProduct:
        """Scrape a product URL with the pipeline its site requires.

        Args:
            url: Product page URL

        Returns:
            Scraped product

        Raises:
            TransportError: Page could not be fetched
            TitleMissingError: Page fetched but no product title found
        """
        extractor = self.registry.resolve(url)
        if extractor is not None and extractor.requires_dynamic_rendering:
            self.logger.info("scrape_routed", url=url, site=extractor.name, pipeline="dynamic")
            return await self.dynamic_scraper.scrape(url, extractor)

        self.logger.info(
            "scrape_routed",
            url=url,
            site=extractor.name if extractor else Site.GENERIC.value,
            pipeline="static",
        )
        return await self.static_scraper.scrape(url, extractor)

    async def scrape_dynamic(self, url: str) -> ScrapedProduct:
        """Force the browser pipeline for a URL.

        Raises:
            ConfigurationError: If the URL's site has no render config
        """
        extractor = self.registry.resolve(url)
        if extractor is None or extractor.render is None:
            raise ConfigurationError(f"No dynamic rendering config for URL: {url}")
        return await self.dynamic_scraper.scrape(url, extractor)


# Global service instance, created on first use
_scraper_service: Optional[ScraperService] = None


def get_scraper_service() -> ScraperService:
    """Get the global ScraperService singleton."""
    global _scraper_service
    if _scraper_service is None:
        _scraper_service = ScraperService()
    return _scraper_service
