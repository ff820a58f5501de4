"""AYM Studio (Shopify, "Focal" theme) extractor."""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.extractors import shopify
from wishlist_tracker.scrapers.utils.dom import (
    ImageCollector,
    image_source,
    meta_content,
    select_all_text,
    select_text,
)
from wishlist_tracker.scrapers.utils.normalizer import (
    clean_text,
    detect_currency,
    get_currency_symbol,
    make_absolute_url,
    parse_price,
)
from wishlist_tracker.schemas.product import ProductVariant

BRAND = "AYM Studio"


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "h1.product-title") or None


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    amount = meta_content(soup, "og:price:amount")
    code = meta_content(soup, "og:price:currency")
    if amount and code:
        return PriceInfo(price=parse_price(amount), currency=get_currency_symbol(code))

    text = select_all_text(soup, "price-list sale-price, price-list regular-price")
    if not text:
        return None
    currency = get_currency_symbol(code) if code else detect_currency(text, url)
    return PriceInfo(price=parse_price(text), currency=currency)


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for img in soup.select("scroll-carousel div.product-gallery__media img"):
        collector.add(image_source(img))
    return collector.to_list()


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    return BRAND


def _swatches(soup: BeautifulSoup, url: str, kind: str) -> List[ProductVariant]:
    variants: List[ProductVariant] = []
    seen = set()
    for label in soup.select(f"div.product-form__swatches--{kind} label.product-form__swatch"):
        value = label.select_one("span.product-form__swatch-value")
        name = clean_text(value.get_text(" ")) if value else ""
        if not name or name in seen:
            continue
        sold_out = label.select_one("span.product-form__swatch-value--sold-out") is not None
        swatch = None
        if kind == "colour":
            img = label.select_one("img.product-form__swatch-image")
            swatch = make_absolute_url(img.get("src"), url) if img else None
        variants.append(ProductVariant(name=name, swatch_url=swatch, available=not sold_out))
        seen.add(name)
    return variants


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    return _swatches(soup, url, "colour") or shopify.product_variants(soup, url, "color")


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    return _swatches(soup, url, "size") or shopify.product_variants(soup, url, "size")


AYM_STUDIO_EXTRACTOR = SiteExtractor(
    site=Site.AYM_STUDIO,
    hostnames=("aym-studio.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
)
