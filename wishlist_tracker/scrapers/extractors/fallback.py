"""Generic fallback extractor.

Best-effort, selector-list based extraction for pages without a dedicated
site extractor, and for the individual fields a site extractor could not
resolve. Sources are tried from most to least structured: Open Graph /
Twitter meta, schema.org (ld+json and itemprop), common test-id and class
conventions, a bare <h1>, and finally the document <title>.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo
from wishlist_tracker.scrapers.utils.dom import (
    ImageCollector,
    find_json_ld_product,
    first_offer,
    image_source,
    meta_content,
)
from wishlist_tracker.scrapers.utils.normalizer import (
    clean_text,
    detect_currency,
    get_currency_symbol,
    parse_price,
)

logger = structlog.get_logger(__name__)

UNTITLED_PRODUCT = "Untitled Product"

TITLE_META_KEYS = ("og:title", "twitter:title")
TITLE_SELECTORS = [
    "h1.product-title",
    "h1.product-name",
    "h1[itemprop='name']",
    "[itemprop='name']",
    "[data-testid='product-title']",
    "[data-qa='product-name']",
    ".product_title",
    ".productTitle",
    "h1",
]

PRICE_SELECTORS = [
    "[itemprop='price']",
    "[data-testid='product-price']",
    "[data-qa='price']",
    ".product-price",
    ".price",
    ".Price",
    ".price--main",
    ".product__price",
    "[class*='price']:not([class*='old']):not([class*='original']):not([class*='was'])",
    "#priceblock_ourprice",
    "#price",
    "#productPrice",
]

IMAGE_SELECTORS = [
    "img[itemprop='image']",
    "[data-testid='product-image'] img",
    "img[data-testid='product-image']",
    ".product-image img",
    "[class*='product'] img",
    "img[src*='product']",
    ".product__main-photos img",
    ".productView-image img",
    "#main-image",
    "#productImage",
    "img[alt*='product']",
]

BRAND_SELECTORS = [
    "[itemprop='brand']",
    "[data-testid='product-brand']",
    ".product-brand",
    "[class*='brand']",
    ".pdp-header__meta",
    ".product-meta__vendor",
    ".product__vendor",
]

OUT_OF_STOCK_MARKERS = ("outofstock", "soldout", "out of stock", "sold out", "discontinued")
ADD_TO_CART_SELECTORS = [
    "button[name='add']",
    "button[type='submit'][name='add']",
    "#add-to-cart-button",
    "#addToCart",
    "[data-testid='add-to-cart']",
    "button[class*='add-to-cart']",
    "button[class*='addToCart']",
    "button[class*='add-to-bag']",
]
SOLD_OUT_BADGE_SELECTORS = [
    ".sold-out",
    ".soldout",
    ".out-of-stock",
    "[class*='sold-out']",
    "[class*='out-of-stock']",
]

SHOPIFY_VENDOR = "shopify"


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------


def _usable_title(candidate: str) -> bool:
    return len(candidate) > 3 and candidate.lower() != "product"


def _strip_site_suffix(title: str) -> str:
    if "|" in title:
        title = title[: title.rfind("|")].strip()
    if " - " in title:
        title = title[: title.rfind(" - ")].strip()
    return title


def extract_title(soup: BeautifulSoup, url: str) -> Optional[str]:
    """Resolve the product title, or None if every source is unusable."""
    for key in TITLE_META_KEYS:
        content = meta_content(soup, key)
        if content and _usable_title(content):
            return content

    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = clean_text(element.get("content") or element.get_text(" "))
        if text and _usable_title(text):
            return text

    if soup.title is not None:
        text = _strip_site_suffix(clean_text(soup.title.get_text()))
        if text and _usable_title(text):
            return text

    return None


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


def _decimal_or_none(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        price = parse_price(str(value))
    # "NaN" and "Infinity" are valid Decimal literals
    if not price.is_finite():
        return None
    return price if price > 0 else None


def extract_price(soup: BeautifulSoup, url: str) -> PriceInfo:
    """Resolve price and currency.

    Never fails: when nothing matches, returns price 0 with the currency
    guessed from the URL.
    """
    for amount_key, currency_key in (
        ("og:price:amount", "og:price:currency"),
        ("product:price:amount", "product:price:currency"),
    ):
        price = _decimal_or_none(meta_content(soup, amount_key))
        if price is not None:
            code = meta_content(soup, currency_key) or meta_content(soup, "og:price:currency")
            currency = get_currency_symbol(code) if code else detect_currency("", url)
            return PriceInfo(price=price, currency=currency)

    product = find_json_ld_product(soup)
    if product:
        offer = first_offer(product)
        if offer:
            price = _decimal_or_none(offer.get("price") or offer.get("lowPrice"))
            if price is not None:
                code = offer.get("priceCurrency")
                currency = get_currency_symbol(code) if code else detect_currency("", url)
                return PriceInfo(price=price, currency=currency)

    currency_meta = meta_content(soup, "og:price:currency", "product:price:currency")
    for selector in PRICE_SELECTORS:
        for element in soup.select(selector):
            text = clean_text(element.get("content") or element.get_text(" "))
            price = parse_price(text)
            if price > 0:
                if currency_meta and not re.search(r"[^\d\s.,]", text):
                    currency = get_currency_symbol(currency_meta)
                else:
                    currency = detect_currency(text, url)
                return PriceInfo(price=price, currency=currency)

    logger.debug("fallback_price_not_found", url=url)
    return PriceInfo(price=Decimal("0"), currency=detect_currency("", url))


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def extract_images(soup: BeautifulSoup, url: str) -> List[str]:
    """Collect up to five unique product image URLs."""
    collector = ImageCollector(url, skip_non_product=True)

    collector.add(meta_content(soup, "og:image", "og:image:secure_url"))
    collector.add(meta_content(soup, "twitter:image", "twitter:image:src"))

    product = find_json_ld_product(soup)
    if product:
        image = product.get("image")
        if isinstance(image, str):
            image = [image]
        if isinstance(image, list):
            for entry in image:
                if isinstance(entry, dict):
                    entry = entry.get("url") or entry.get("contentUrl")
                if isinstance(entry, str):
                    collector.add(entry)

    for selector in IMAGE_SELECTORS:
        if collector.full:
            break
        for element in soup.select(selector):
            if collector.full:
                break
            collector.add(image_source(element))

    return collector.to_list()


# ---------------------------------------------------------------------------
# Brand
# ---------------------------------------------------------------------------


def _clean_brand(value) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("name")
    if not isinstance(value, str):
        return None
    brand = re.sub(r"^brand:\s*", "", clean_text(value), flags=re.IGNORECASE)
    if len(brand) <= 1 or brand.lower() in ("brand", SHOPIFY_VENDOR):
        return None
    return brand


def extract_brand(soup: BeautifulSoup, url: str, title: Optional[str] = None) -> Optional[str]:
    """Resolve the brand; absence is normal and returns None.

    Args:
        soup: Parsed page
        url: Page URL
        title: Already-resolved title, used for the "Brand - Name" heuristic
    """
    brand = _clean_brand(meta_content(soup, "og:brand", "product:brand"))
    if brand:
        return brand

    product = find_json_ld_product(soup)
    if product:
        brand = _clean_brand(product.get("brand"))
        if brand:
            return brand

    for selector in BRAND_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        brand = _clean_brand(element.get("content") or element.get_text(" "))
        if brand:
            return brand

    title = title or extract_title(soup, url)
    if title and " - " in title:
        prefix = title.split(" - ", 1)[0].strip()
        if prefix and len(prefix) < 20:
            return prefix
    return None


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


def _is_out_of_stock_marker(value: Optional[str]) -> bool:
    if not value:
        return False
    lowered = value.lower()
    return any(marker in lowered for marker in OUT_OF_STOCK_MARKERS)


def extract_stock(soup: BeautifulSoup, url: str) -> bool:
    """In stock unless the page carries an explicit out-of-stock indicator."""
    availability = meta_content(
        soup, "product:availability", "og:availability", "availability"
    )
    if _is_out_of_stock_marker(availability):
        return False

    product = find_json_ld_product(soup)
    if product:
        offer = first_offer(product)
        if offer and _is_out_of_stock_marker(str(offer.get("availability") or "")):
            return False

    for element in soup.select("[itemprop='availability']"):
        if _is_out_of_stock_marker(element.get("href") or element.get("content")):
            return False

    for selector in ADD_TO_CART_SELECTORS:
        button = soup.select_one(selector)
        if button is not None and _is_out_of_stock_marker(button.get_text(" ")):
            return False

    for selector in SOLD_OUT_BADGE_SELECTORS:
        badge = soup.select_one(selector)
        if badge is not None and _is_out_of_stock_marker(badge.get_text(" ")):
            return False

    return True

