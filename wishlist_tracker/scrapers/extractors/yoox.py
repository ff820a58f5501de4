"""Yoox extractor. Class names carry CSS-module hashes and break on redesigns."""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, has_class, image_source, select_text
from wishlist_tracker.scrapers.utils.normalizer import clean_text, detect_currency, parse_price
from wishlist_tracker.schemas.product import ProductVariant

DISABLED_CLASS = "SizePicker_disabled__ma4Lp"


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "h1.ItemInfo_designer__XsNGI a") or None


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "h2.ItemInfo_microcat__cTaMO a") or None


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    text = select_text(soup, "div.ItemInfo_price___W18c div.price[data-ta='current-price']")
    if not text:
        return None
    return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for img in soup.select("div.PicturesSlider_photoSlider__BUjaM img"):
        src = image_source(img)
        if src and src.startswith("http"):
            collector.add(src)
    return collector.to_list()


def extract_colors(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    colors = []
    for link in soup.select("div.ColorPicker_color-picker__VS_Ec a.ColorPicker_color-elem__KV09t"):
        sample = link.select_one("div.ColorPicker_color-sample__yS_FM")
        name = clean_text(sample.get("title")) if sample else ""
        if not name:
            continue
        disabled = link.parent is not None and has_class(link.parent, DISABLED_CLASS)
        colors.append(ProductVariant(name=name, available=not disabled))
    return colors


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    sizes = []
    for item in soup.select("div[data-ta='size-picker'] div.SizePicker_size-item__nL4z_"):
        name = select_text(item, "span.SizePicker_size-title__LucnR")
        if name:
            sizes.append(ProductVariant(name=name, available=not has_class(item, DISABLED_CLASS)))
    return sizes


YOOX_EXTRACTOR = SiteExtractor(
    site=Site.YOOX,
    hostnames=("yoox.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_colors=extract_colors,
    extract_sizes=extract_sizes,
)
