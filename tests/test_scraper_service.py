"""Tests for routing URLs to the static or dynamic pipeline."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from wishlist_tracker.core.exceptions import ConfigurationError
from wishlist_tracker.scrapers.base import Site
from wishlist_tracker.scrapers.dynamic_scraper import DynamicScraper
from wishlist_tracker.scrapers.register_extractors import register_all_extractors
from wishlist_tracker.scrapers.registry import ExtractorRegistry
from wishlist_tracker.scrapers.scraper_service import ScraperService

from conftest import make_scraped
import sample_pages as pages


@pytest.fixture
def static_scraper():
    scraper = MagicMock()
    scraper.scrape = AsyncMock(return_value=make_scraped())
    return scraper


@pytest.fixture
def dynamic_scraper():
    scraper = MagicMock()
    scraper.scrape = AsyncMock(return_value=make_scraped())
    return scraper


@pytest.fixture
def service(static_scraper, dynamic_scraper):
    return ScraperService(
        registry=register_all_extractors(ExtractorRegistry()),
        static_scraper=static_scraper,
        dynamic_scraper=dynamic_scraper,
    )


class TestRouting:
    """Tests for ScraperService.scrape."""

    @pytest.mark.parametrize("url", [pages.ZARA_URL, pages.HM_URL, pages.FARFETCH_URL])
    async def test_dynamic_sites(self, service, static_scraper, dynamic_scraper, url):
        await service.scrape(url)

        dynamic_scraper.scrape.assert_awaited_once()
        called_url, extractor = dynamic_scraper.scrape.await_args.args
        assert called_url == url
        assert extractor.requires_dynamic_rendering
        static_scraper.scrape.assert_not_awaited()

    @pytest.mark.parametrize(
        "url,site",
        [
            (pages.AMAZON_URL, Site.AMAZON),
            (pages.YOOX_URL, Site.YOOX),
            (pages.AYM_URL, Site.AYM_STUDIO),
        ],
    )
    async def test_static_sites(self, service, static_scraper, dynamic_scraper, url, site):
        await service.scrape(url)

        called_url, extractor = static_scraper.scrape.await_args.args
        assert called_url == url
        assert extractor.site == site
        dynamic_scraper.scrape.assert_not_awaited()

    async def test_unknown_site_uses_static_fallback(self, service, static_scraper):
        await service.scrape(pages.GENERIC_URL)

        static_scraper.scrape.assert_awaited_once_with(pages.GENERIC_URL, None)

    async def test_errors_propagate(self, service, dynamic_scraper):
        dynamic_scraper.scrape.side_effect = ConfigurationError("broken")

        with pytest.raises(ConfigurationError):
            await service.scrape(pages.ZARA_URL)


class TestScrapeDynamic:
    """Tests for ScraperService.scrape_dynamic."""

    async def test_site_without_render_config(self, service):
        with pytest.raises(ConfigurationError):
            await service.scrape_dynamic(pages.AMAZON_URL)

    async def test_unknown_site(self, service):
        with pytest.raises(ConfigurationError):
            await service.scrape_dynamic(pages.GENERIC_URL)

    async def test_dynamic_site(self, service, dynamic_scraper):
        await service.scrape_dynamic(pages.ZARA_URL)

        dynamic_scraper.scrape.assert_awaited_once()


def test_dynamic_scraper_created_lazily(static_scraper):
    service = ScraperService(
        registry=register_all_extractors(ExtractorRegistry()),
        static_scraper=static_scraper,
    )

    assert service._dynamic_scraper is None
    assert isinstance(service.dynamic_scraper, DynamicScraper)
    assert service.dynamic_scraper.rate_limiter is service.rate_limiter
