"""Amazon product page extractor (all regional storefronts)."""

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, select_text
from wishlist_tracker.scrapers.utils.normalizer import clean_text, detect_currency, parse_price

# "._AC_US40_." size modifiers; dropping them yields the full-size image
_THUMBNAIL_MODIFIER_RE = re.compile(r"\._.*?_\.")

_UNAVAILABLE_MARKERS = ("currently unavailable", "out of stock", "temporarily out of stock")


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "#productTitle") or None


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    for selector in (
        ".a-price .a-offscreen",
        "#priceblock_ourprice",
        "#priceblock_dealprice",
    ):
        text = select_text(soup, selector)
        if text:
            return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))

    whole = select_text(soup, "span.a-price-whole")
    if whole:
        fraction = select_text(soup, "span.a-price-fraction")
        symbol = select_text(soup, "span.a-price-symbol")
        text = f"{symbol}{whole.rstrip('.,')}.{fraction}" if fraction else f"{symbol}{whole}"
        return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))
    return None


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for img in soup.select("#altImages ul li.imageThumbnail img"):
        src = img.get("src")
        if src:
            collector.add(_THUMBNAIL_MODIFIER_RE.sub(".", src, count=1))
    if not collector.to_list():
        landing = soup.select_one("#landingImage, #imgBlkFront")
        if landing is not None:
            collector.add(landing.get("data-old-hires") or landing.get("src"))
    return collector.to_list()


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    text = select_text(soup, "#bylineInfo") or select_text(soup, "a#brand")
    if not text:
        return None
    text = re.sub(r"^Visit the\s+", "", text)
    text = re.sub(r"\s+Store$", "", text)
    text = re.sub(r"^Brand:\s*", "", text, flags=re.IGNORECASE)
    return clean_text(text) or None


def extract_stock(soup: BeautifulSoup, url: str) -> Optional[bool]:
    availability = select_text(soup, "#availability").lower()
    if not availability:
        return None
    return not any(marker in availability for marker in _UNAVAILABLE_MARKERS)


AMAZON_EXTRACTOR = SiteExtractor(
    site=Site.AMAZON,
    hostnames=("amazon.",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_stock=extract_stock,
)
