"""Farfetch extractor.

Sizes only appear in the DOM after the size dropdown is opened, so the
render config clicks it before the page is captured.
"""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, RenderConfig, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, image_source, is_disabled, select_text
from wishlist_tracker.scrapers.utils.normalizer import clean_text, detect_currency, parse_price
from wishlist_tracker.schemas.product import ProductVariant

SIZE_DROPDOWN_SELECTOR = (
    "div[data-testid='ScaledSizeSelector'] div.ltr-1aksjyr, "
    "div[data-component='SizeSelector'] button"
)


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "p[data-testid='product-short-description']") or None


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    return (
        select_text(
            soup,
            "h1.ltr-i980jo a.ltr-1rkeqir-Body-Heading, a[data-component='DesignerName']",
        )
        or None
    )


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    text = select_text(soup, "p[data-component='PriceLarge']")
    if not text:
        return None
    return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for img in soup.select(
        "div.ltr-1kklpjs button.ltr-1c58b5g img, [data-testid='product-image'] img"
    ):
        src = image_source(img)
        if src and src.startswith("http"):
            collector.add(src)
    return collector.to_list()


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    colors = []
    for button in soup.select(
        "div[data-testid='ColorSelector'] button, div[data-component='ColorSelector'] button"
    ):
        name = clean_text(button.get("aria-label") or button.get("title"))
        if name and "select" not in name.lower():
            colors.append(ProductVariant(name=name, available=True))
    return colors


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    sizes = []
    for option in soup.select("[data-testid='SizeOption'], [data-component='SizeOption']"):
        name = clean_text(option.get_text(" "))
        if name:
            sizes.append(ProductVariant(name=name, available=not is_disabled(option)))
    return sizes


FARFETCH_EXTRACTOR = SiteExtractor(
    site=Site.FARFETCH,
    hostnames=("farfetch.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
    requires_dynamic_rendering=True,
    render=RenderConfig(
        wait_selector="p[data-component='PriceLarge']",
        timeout_ms=10_000,
        settle_ms=2_000,
        expand_selector=SIZE_DROPDOWN_SELECTOR,
    ),
)
