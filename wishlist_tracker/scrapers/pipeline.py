"""Turn a fetched product page into a ScrapedProduct.

Shared by the static and dynamic scrapers: each field is taken from the
site extractor when it provides a non-empty value and from the generic
fallback otherwise.
"""

from decimal import Decimal
from typing import Any, Callable, List, Optional

import structlog
from bs4 import BeautifulSoup

from wishlist_tracker.core.exceptions import TitleMissingError
from wishlist_tracker.schemas.product import ProductVariant, ScrapedProduct
from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.extractors import fallback
from wishlist_tracker.scrapers.utils.dom import ImageCollector, parse_html
from wishlist_tracker.scrapers.utils.normalizer import clean_text

logger = structlog.get_logger(__name__)


def _run_capability(
    capability: Optional[Callable[[BeautifulSoup, str], Any]],
    soup: BeautifulSoup,
    url: str,
    site: str,
    field: str,
) -> Any:
    """Call a site capability, treating a crash like "not found"."""
    if capability is None:
        return None
    try:
        return capability(soup, url)
    except Exception as e:
        logger.warning(
            "site_extractor_failed",
            site=site,
            field=field,
            url=url,
            error=str(e),
        )
        return None


def _resolve_stock(
    soup: BeautifulSoup,
    url: str,
    extractor: Optional[SiteExtractor],
    colors: List[ProductVariant],
    sizes: List[ProductVariant],
) -> bool:
    # Variant availability is the most reliable signal when present
    if sizes:
        return any(size.available is not False for size in sizes)
    if colors:
        return any(color.available is not False for color in colors)
    if extractor is not None:
        stock = _run_capability(extractor.extract_stock, soup, url, extractor.name, "stock")
        if stock is not None:
            return bool(stock)
    return fallback.extract_stock(soup, url)


def extract_product(html: str, url: str, extractor: Optional[SiteExtractor]) -> ScrapedProduct:
    """Extract a product from page HTML.

    Args:
        html: Page markup (raw response or browser-rendered)
        url: Final page URL, used to resolve relative links and currency hints
        extractor: Site capability set, or None for unknown sites

    Returns:
        Scraped product

    Raises:
        TitleMissingError: If no usable title could be found
    """
    soup = parse_html(html)
    site = extractor.name if extractor else Site.GENERIC.value

    def site_value(field: str) -> Any:
        if extractor is None:
            return None
        return _run_capability(
            getattr(extractor, f"extract_{field}"), soup, url, site, field
        )

    title = clean_text(site_value("title")) or fallback.extract_title(soup, url)
    if not title or title == fallback.UNTITLED_PRODUCT:
        logger.warning("product_title_missing", site=site, url=url)
        raise TitleMissingError(url)

    price_info: Optional[PriceInfo] = site_value("price")
    if price_info is None or not price_info.price.is_finite() or price_info.price <= 0:
        price_info = fallback.extract_price(soup, url)
    if price_info.price <= 0:
        logger.warning("price_not_found", site=site, url=url)

    collector = ImageCollector(url)
    collector.extend(site_value("images") or fallback.extract_images(soup, url))

    brand = clean_text(site_value("brand")) or fallback.extract_brand(soup, url, title)

    colors = site_value("colors") or []
    sizes = site_value("sizes") or []
    in_stock = _resolve_stock(soup, url, extractor, colors, sizes)

    product = ScrapedProduct(
        title=title,
        price=max(price_info.price, Decimal("0")),
        currency=price_info.currency,
        images=collector.to_list(),
        brand=brand or None,
        in_stock=in_stock,
        colors=colors or None,
        sizes=sizes or None,
        url=url,
    )

    logger.info(
        "product_extracted",
        site=site,
        url=url,
        price=str(product.price),
        currency=product.currency,
        images=len(product.images),
        colors=len(colors),
        sizes=len(sizes),
    )
    return product
