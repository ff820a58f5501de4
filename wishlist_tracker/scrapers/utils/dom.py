"""BeautifulSoup helpers shared by the site and fallback extractors."""

import json
from typing import Any, Iterator, List, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from wishlist_tracker.schemas.product import MAX_PRODUCT_IMAGES
from wishlist_tracker.scrapers.utils.normalizer import (
    clean_text,
    make_absolute_url,
    parse_srcset,
)

logger = structlog.get_logger(__name__)

# Substrings that mark site chrome rather than product photos
NON_PRODUCT_IMAGE_MARKERS = ("placeholder", "icon", "sprite", "logo")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def select_text(soup: BeautifulSoup | Tag, selector: str) -> str:
    """Cleaned text of the first element matching ``selector`` ("" if none)."""
    element = soup.select_one(selector)
    if element is None:
        return ""
    return clean_text(element.get_text(" "))


def select_all_text(soup: BeautifulSoup | Tag, selector: str) -> str:
    """Cleaned, concatenated text of every element matching ``selector``."""
    return clean_text(" ".join(el.get_text(" ") for el in soup.select(selector)))


def meta_content(soup: BeautifulSoup, *keys: str) -> Optional[str]:
    """Content of the first meta tag whose property/name/itemprop is one of ``keys``."""
    for key in keys:
        for attr in ("property", "name", "itemprop"):
            tag = soup.find("meta", attrs={attr: key})
            if tag is not None:
                content = clean_text(tag.get("content"))
                if content:
                    return content
    return None


def load_json(raw: Optional[str]) -> Optional[Any]:
    """Parse JSON embedded in a script tag, returning None on malformed input."""
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.debug("embedded_json_invalid", preview=raw[:80])
        return None


def iter_json_ld(soup: BeautifulSoup) -> Iterator[dict]:
    """Yield every object found in ld+json blocks, flattening lists and @graph."""
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        data = load_json(script.string or script.get_text())
        stack = [data]
        while stack:
            node = stack.pop(0)
            if isinstance(node, list):
                stack.extend(node)
            elif isinstance(node, dict):
                yield node
                if isinstance(node.get("@graph"), list):
                    stack.extend(node["@graph"])


def find_json_ld_product(soup: BeautifulSoup) -> Optional[dict]:
    """First ld+json object typed Product, else the first one that looks like one."""
    candidates = list(iter_json_ld(soup))
    for node in candidates:
        node_type = node.get("@type")
        types = node_type if isinstance(node_type, list) else [node_type]
        if "Product" in types:
            return node
    for node in candidates:
        if "offers" in node and "name" in node:
            return node
    return None


def first_offer(product: dict) -> Optional[dict]:
    """The first offer of an ld+json product, whether ``offers`` is a list or a dict."""
    offers = product.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    if isinstance(offers, dict):
        # AggregateOffer nests the concrete offers one level down
        nested = offers.get("offers")
        if "price" not in offers and isinstance(nested, list) and nested:
            return nested[0] if isinstance(nested[0], dict) else None
        return offers
    return None


def image_source(tag: Tag) -> Optional[str]:
    """Best image URL on an <img>/<source>/<meta>: srcset wins over src."""
    srcset = tag.get("srcset") or tag.get("data-srcset")
    if srcset:
        return parse_srcset(srcset)
    return tag.get("content") or tag.get("src") or tag.get("data-src")


def has_class(tag: Tag, class_name: str) -> bool:
    return class_name in (tag.get("class") or [])


def is_disabled(tag: Tag) -> bool:
    return tag.has_attr("disabled") or tag.get("aria-disabled") == "true"


class ImageCollector:
    """Accumulates unique absolute image URLs up to the product image cap."""

    def __init__(
        self,
        base_url: str,
        limit: int = MAX_PRODUCT_IMAGES,
        skip_non_product: bool = False,
        force_https: bool = False,
    ):
        self.base_url = base_url
        self.limit = limit
        self.skip_non_product = skip_non_product
        self.force_https = force_https
        self._images: List[str] = []
        self._seen: set[str] = set()

    @property
    def full(self) -> bool:
        return len(self._images) >= self.limit

    def add(self, src: Optional[str]) -> bool:
        """Add an image URL; returns True if it was accepted."""
        if self.full:
            return False
        url = make_absolute_url(src, self.base_url)
        if not url or url.startswith("data:") or len(url) <= 10:
            return False
        if self.force_https and url.startswith("http:"):
            url = "https:" + url[len("http:"):]
        if self.skip_non_product:
            lowered = url.lower()
            if any(marker in lowered for marker in NON_PRODUCT_IMAGE_MARKERS):
                return False
        if url in self._seen:
            return False
        self._seen.add(url)
        self._images.append(url)
        return True

    def extend(self, sources) -> None:
        for src in sources:
            if self.full:
                break
            self.add(src)

    def to_list(self) -> List[str]:
        return list(self._images)
