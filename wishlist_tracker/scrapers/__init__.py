"""Product page scraping.

This package provides:
- Site extractor capability sets and the registry that resolves them by URL
- Static (HTTP) and dynamic (headless browser) page acquisition
- The price check scheduler
"""

from .base import PriceInfo, RenderConfig, Site, SiteExtractor
from .registry import ExtractorRegistry, extractor_registry, get_extractor_registry
from .scraper_service import ScraperService, get_scraper_service

__all__ = [
    # Capability sets
    "PriceInfo",
    "RenderConfig",
    "Site",
    "SiteExtractor",
    # Registry
    "ExtractorRegistry",
    "extractor_registry",
    "get_extractor_registry",
    # Service
    "ScraperService",
    "get_scraper_service",
]
