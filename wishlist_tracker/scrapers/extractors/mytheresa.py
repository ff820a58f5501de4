"""Mytheresa extractor."""

from typing import List, Optional

from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo, Site, SiteExtractor
from wishlist_tracker.scrapers.utils.dom import ImageCollector, has_class, image_source, select_text
from wishlist_tracker.scrapers.utils.normalizer import detect_currency, parse_price
from wishlist_tracker.schemas.product import ProductVariant


def extract_brand(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "div.product__area__branding__designer a") or None


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    return select_text(soup, "div.product__area__branding__name") or None


def extract_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    text = select_text(soup, "span.pricing__prices__price")
    if not text:
        return None
    return PriceInfo(price=parse_price(text), currency=detect_currency(text, url))


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    collector = ImageCollector(url)
    for slide in soup.select("div.product__gallery__carousel div.swiper-wrapper div.swiper-slide"):
        # The carousel clones slides for infinite scrolling
        if has_class(slide, "swiper-slide-duplicate"):
            continue
        img = slide.find("img")
        src = image_source(img) if img else None
        if src and src.startswith("http"):
            collector.add(src)
    return collector.to_list()


def extract_sizes(soup: BeautifulSoup, url: str) -> List[ProductVariant]:
    sizes = []
    for item in soup.select("div.dropdown__options__wrapper div.sizeitem"):
        if has_class(item, "sizeitem--placeholder"):
            continue
        name = select_text(item, "span.sizeitem__label")
        if name:
            sizes.append(
                ProductVariant(name=name, available=not has_class(item, "sizeitem--notavailable"))
            )
    return sizes


MYTHERESA_EXTRACTOR = SiteExtractor(
    site=Site.MYTHERESA,
    hostnames=("mytheresa.com",),
    extract_title=extract_title,
    extract_price=extract_price,
    extract_images=extract_images,
    extract_brand=extract_brand,
    extract_sizes=extract_sizes,
)
