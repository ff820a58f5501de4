"""H&M extractor.

The product page ships a ``script#product-schema`` ld+json block once the
client app has hydrated; it is the primary source for every field.
"""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, RenderConfig, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, load_json, select_text
from wishlist_tracker.scrapers.utils.normalizer import (
    clean_text,
    detect_currency,
    get_currency_symbol,
    make_absolute_url,
    parse_price,
)
from wishlist_tracker.schemas.product import ProductVariant

DEFAULT_BRAND = "H&M"


def _product_schema(soup: BeautifulSoup) -> dict:
    script = soup.select_one("script#product-schema")
    if script is None:
        return {}
    data = load_json(script.string or script.get_text())
    return data if isinstance(data, dict) else {}


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    name = _product_schema(soup).get("name")
    if isinstance(name, str) and name.strip():
        return clean_text(name)
    return select_text(soup, "h1") or None


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    offers = _product_schema(soup).get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    if isinstance(offers, dict) and offers.get("price"):
        price = parse_price(str(offers["price"]))
        if price > 0:
            return PriceInfo(
                price=price,
                currency=get_currency_symbol(offers.get("priceCurrency") or "USD"),
            )

    text = select_text(soup, "span[translate='no']")
    if not text:
        return None
    return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    images = _product_schema(soup).get("image")
    collector = ImageCollector(url)
    if isinstance(images, str):
        images = [images]
    if isinstance(images, list):
        collector.extend(src for src in images if isinstance(src, str))
    return collector.to_list()


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    brand = _product_schema(soup).get("brand")
    if isinstance(brand, dict):
        brand = brand.get("name")
    if isinstance(brand, str) and brand.strip():
        return clean_text(brand)
    return DEFAULT_BRAND


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    colors = []
    for link in soup.select("div[data-testid='color-selector-wrapper'] a[role='radio']"):
        name = clean_text(link.get("title"))
        if not name:
            continue
        img = link.find("img")
        swatch = make_absolute_url(img.get("src"), url) if img else None
        colors.append(ProductVariant(name=name, swatch_url=swatch, available=True))
    return colors


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    sizes = []
    for option in soup.select(
        "div[data-testid='size-selector'] ul[data-testid='grid'] div[role='radio']"
    ):
        label = option.find("div")
        name = clean_text(label.get_text(" ") if label else option.get_text(" "))
        if not name:
            continue
        aria_label = (option.get("aria-label") or "").lower()
        sizes.append(ProductVariant(name=name, available="out of stock" not in aria_label))
    return sizes


HM_EXTRACTOR = SiteExtractor(
    site=Site.HM,
    hostnames=("hm.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
    requires_dynamic_rendering=True,
    render=RenderConfig(
        wait_selector="#product-schema",
        timeout_ms=10_000,
        settle_ms=1_000,
    ),
)
