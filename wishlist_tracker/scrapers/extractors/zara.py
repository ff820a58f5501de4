"""Zara extractor. Prices and variants are rendered client-side."""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, RenderConfig, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, image_source, is_disabled, select_text
from wishlist_tracker.scrapers.utils.normalizer import clean_text, detect_currency, parse_price
from wishlist_tracker.schemas.product import ProductVariant

BRAND = "ZARA"


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return (
        select_text(soup, "h1.product-detail-card-info__title span.product-detail-card-info__name")
        or select_text(soup, "span[data-qa-qualifier='product-detail-info-name']")
        or None
    )


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    text = select_text(
        soup, "span[data-qa-qualifier='price-amount-current'] span.money-amount__main"
    )
    if not text:
        return None
    return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for picture in soup.select("picture[data-qa-qualifier='media-image']"):
        source = picture.find("source")
        img = picture.find("img")
        if source is not None and (source.get("srcset") or source.get("data-srcset")):
            collector.add(image_source(source))
        elif img is not None:
            collector.add(image_source(img))
    return collector.to_list()


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    return BRAND


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    colors = []
    for item in soup.select(
        "ul.product-detail-color-selector__colors li.product-detail-color-item"
    ):
        name = select_text(item, "span.screen-reader-text")
        if name:
            colors.append(ProductVariant(name=name, available=True))
    return colors


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    sizes = []
    for button in soup.select(
        "div[data-qa-qualifier='size-selector'] button[data-qa-action='size-selector-button']"
    ):
        label = button.find("span")
        name = clean_text(label.get_text(" ") if label else button.get_text(" "))
        if name and "size guide" not in name.lower():
            sizes.append(ProductVariant(name=name, available=not is_disabled(button)))
    return sizes


ZARA_EXTRACTOR = SiteExtractor(
    site=Site.ZARA,
    hostnames=("zara.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
    requires_dynamic_rendering=True,
    render=RenderConfig(
        wait_selector="span[data-qa-qualifier='price-amount-current']",
        timeout_ms=10_000,
        settle_ms=2_000,
    ),
)
