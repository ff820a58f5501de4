"""Plain-HTTP page acquisition for server-rendered product pages."""

from typing import Optional, Tuple

import httpx
import structlog
from tenacity.wait import wait_base

from wishlist_tracker.config import settings
from wishlist_tracker.core.exceptions import (
    AccessDeniedError,
    NetworkError,
    PageNotFoundError,
    ScrapeTimeoutError,
    ServerUnavailableError,
)
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.scrapers.base import SiteExtractor
from wishlist_tracker.scrapers.pipeline import extract_product
from wishlist_tracker.scrapers.utils.rate_limiter import DomainRateLimiter
from wishlist_tracker.scrapers.utils.retry import build_scrape_retrying
from wishlist_tracker.scrapers.utils.user_agents import get_chrome_user_agent

logger = structlog.get_logger(__name__)


def build_browser_headers() -> dict:
    """Request headers mimicking a desktop Chrome navigation."""
    return {
        "User-Agent": get_chrome_user_agent(),
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "Cache-Control": "no-cache",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
    }


def raise_for_page_status(status_code: int, url: str) -> None:
    """Map a non-success HTTP status to the transport error taxonomy.

    Raises:
        AccessDeniedError: 403
        PageNotFoundError: 404
        ServerUnavailableError: 5xx
        NetworkError: Any other non-2xx status
    """
    if 200 <= status_code < 300:
        return
    if status_code == 403:
        raise AccessDeniedError(url)
    if status_code == 404:
        raise PageNotFoundError(url)
    if status_code >= 500:
        raise ServerUnavailableError(status_code, url)
    raise NetworkError(f"HTTP {status_code}", url)


class StaticScraper:
    """Fetches raw HTML over HTTP and runs the extraction pipeline.

    Args:
        client: Shared httpx client (one is created per fetch when omitted)
        rate_limiter: Per-domain limiter; None disables throttling
        timeout: Per-request timeout in seconds
        max_redirects: Redirect hops followed before failing
        retry_attempts: Total attempts for transient failures
        retry_wait: Override for the retry backoff strategy
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
        timeout: float = settings.SCRAPE_TIMEOUT_SECONDS,
        max_redirects: int = settings.SCRAPE_MAX_REDIRECTS,
        retry_attempts: int = settings.SCRAPE_RETRY_ATTEMPTS,
        retry_wait: Optional[wait_base] = None,
    ):
        self._client = client
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait
        self.logger = logger.bind(service="static_scraper")

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            return await client.get(url, headers=build_browser_headers(), follow_redirects=True)
        except httpx.TimeoutException as e:
            raise ScrapeTimeoutError(url) from e
        except httpx.TooManyRedirects as e:
            raise NetworkError("too many redirects", url) from e
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__, url) from e

    async def _fetch_once(self, url: str) -> Tuple[str, str]:
        if self.rate_limiter:
            await self.rate_limiter.acquire_for_url(url)

        if self._client is not None:
            response = await self._get(self._client, url)
        else:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                max_redirects=self.max_redirects,
            ) as client:
                response = await self._get(client, url)

        raise_for_page_status(response.status_code, url)
        return response.text, str(response.url)

    async def fetch_page(self, url: str) -> Tuple[str, str]:
        """Fetch page HTML, retrying transient failures.

        Returns:
            Tuple of (html, final URL after redirects)

        Raises:
            TransportError: Classified fetch failure after retries are exhausted
        """
        self.logger.info("fetching_page", url=url)
        async for attempt in build_scrape_retrying(self.retry_attempts, self.retry_wait):
            with attempt:
                html, final_url = await self._fetch_once(url)
        if final_url != url:
            self.logger.debug("page_redirected", url=url, final_url=final_url)
        self.logger.debug("page_fetched", url=final_url, length=len(html))
        return html, final_url

    async def fetch_html(self, url: str) -> str:
        html, _ = await self.fetch_page(url)
        return html

    async def scrape(self, url: str, extractor: Optional[SiteExtractor]) -> ScrapedProduct:
        """Fetch a product page and extract it.

        Args:
            url: Product page URL
            extractor: Site capability set, or None for the generic fallback

        Returns:
            Scraped product whose ``url`` is the page's final URL
        """
        html, final_url = await self.fetch_page(url)
        return extract_product(html, final_url, extractor)
