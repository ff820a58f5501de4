"""GianaWorld (Shopify) extractor.

Product data comes from the embedded Shopify product JSON; the markup is
only consulted when that blob is missing.
"""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.extractors import shopify
from wishlist_tracker.schemas.product import ProductVariant

HOUSE_BRAND = "GIANA"


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return shopify.product_title(soup)


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    return shopify.product_price(soup, url)


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    return shopify.product_images(soup, url)


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    """Third-party vendor if listed, otherwise the house brand."""
    return shopify.product_vendor(soup) or HOUSE_BRAND


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    return shopify.product_variants(soup, url, "color")


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    return shopify.product_variants(soup, url, "size")


GIANA_WORLD_EXTRACTOR = SiteExtractor(
    site=Site.GIANA_WORLD,
    hostnames=("gianaworld.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
)
