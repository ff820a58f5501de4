"""Shared parsing for Shopify storefronts.

Shopify themes expose the product in several places: an app-injected
``window.ORDERSIFY_BIS.product = {...};`` blob, ``data-product-json``
script tags, ld+json, and finally the variant pickers in the markup.
Variant prices in the product JSON are in cents.
"""

import math
import re
from decimal import Decimal
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup

from wishlist_tracker.scrapers.base import PriceInfo
from wishlist_tracker.scrapers.utils.dom import (
    ImageCollector,
    find_json_ld_product,
    first_offer,
    has_class,
    image_source,
    is_disabled,
    load_json,
    meta_content,
)
from wishlist_tracker.scrapers.utils.normalizer import (
    clean_text,
    detect_currency,
    get_currency_symbol,
    make_absolute_url,
    parse_price,
)
from wishlist_tracker.schemas.product import ProductVariant

logger = structlog.get_logger(__name__)

_ORDERSIFY_RE = re.compile(r"window\.ORDERSIFY_BIS\.product\s*=\s*(\{.*?\});", re.DOTALL)

PLACEHOLDER_VENDORS = {"shopify", "ourwewewe"}

SOLD_OUT_CLASSES = ("disabled", "sold-out", "is-disabled")


def _option_selectors(option: str) -> tuple:
    title = option.capitalize()
    return (
        f"select[name*='option'], select[id*='{title}'], select[data-option*='{option}']",
        ", ".join([
            f"fieldset[data-option-name*='{option}' i] label",
            f"div.product-form__swatches--{'colour' if option == 'color' else option} "
            "label.product-form__swatch",
            "label.color-swatch" if option == "color" else "label.block-swatch",
        ]),
    )


def find_embedded_product(soup: BeautifulSoup) -> Optional[dict]:
    """Product object from the ORDERSIFY blob, else from a data-product-json script."""
    for script in soup.find_all("script"):
        content = script.string or ""
        if "ORDERSIFY_BIS.product" not in content:
            continue
        match = _ORDERSIFY_RE.search(content)
        if match:
            data = load_json(match.group(1))
            if isinstance(data, dict):
                return data

    for script in soup.select(
        "script[type='application/json'][data-product-json], "
        "script#ProductJson-product-template"
    ):
        data = load_json(script.string or script.get_text())
        if isinstance(data, dict):
            product = data.get("product", data)
            if isinstance(product, dict):
                return product
    return None


def is_placeholder_vendor(vendor: Optional[str]) -> bool:
    return not vendor or vendor.strip().lower() in PLACEHOLDER_VENDORS


def product_title(soup: BeautifulSoup) -> Optional[str]:
    product = find_embedded_product(soup)
    if product and product.get("title"):
        return clean_text(str(product["title"]))
    ld_product = find_json_ld_product(soup)
    if ld_product and ld_product.get("name"):
        return clean_text(str(ld_product["name"]))
    element = soup.select_one("h1.product-title, h1.product_title, h1[itemprop='name']")
    return clean_text(element.get_text(" ")) if element else None


def product_vendor(soup: BeautifulSoup) -> Optional[str]:
    product = find_embedded_product(soup)
    if product and not is_placeholder_vendor(product.get("vendor")):
        return clean_text(product["vendor"])
    ld_product = find_json_ld_product(soup)
    if ld_product:
        brand = ld_product.get("brand")
        if isinstance(brand, dict):
            brand = brand.get("name")
        if isinstance(brand, str) and not is_placeholder_vendor(brand):
            return clean_text(brand)
    element = soup.select_one(
        ".product-vendor a, .product__vendor a, [data-testid='product-vendor']"
    )
    if element is not None:
        vendor = clean_text(element.get_text(" "))
        if not is_placeholder_vendor(vendor):
            return vendor
    return None


def _currency(soup: BeautifulSoup, url: str) -> str:
    code = meta_content(soup, "og:price:currency")
    return get_currency_symbol(code) if code else detect_currency("", url)


def product_price(soup: BeautifulSoup, url: str) -> Optional[PriceInfo]:
    """Price of the first available variant, falling back to the listed price."""
    product = find_embedded_product(soup)
    if product:
        variants = product.get("variants") or []
        variant = next(
            (v for v in variants if isinstance(v, dict) and v.get("available") and v.get("price")),
            None,
        )
        cents = variant.get("price") if variant else product.get("price")
        if isinstance(cents, (int, float)) and math.isfinite(cents) and cents > 0:
            price = (Decimal(str(cents)) / 100).quantize(Decimal("0.01"))
            return PriceInfo(price=price, currency=_currency(soup, url))

    ld_product = find_json_ld_product(soup)
    if ld_product:
        offer = first_offer(ld_product)
        if offer and offer.get("price") and offer.get("priceCurrency"):
            price = parse_price(str(offer["price"]))
            if price > 0:
                return PriceInfo(price=price, currency=get_currency_symbol(offer["priceCurrency"]))

    amount = meta_content(soup, "og:price:amount")
    if amount:
        price = parse_price(amount)
        if price > 0:
            return PriceInfo(price=price, currency=_currency(soup, url))

    for selector in (
        ".price__sale .price-item--sale, .product-single__price--on-sale .money",
        ".price__regular .price-item--regular, .product-single__price .money, .product__price",
        "span[data-product-price]",
    ):
        element = soup.select_one(selector)
        text = clean_text(element.get_text(" ")) if element else ""
        if text:
            code = meta_content(soup, "og:price:currency")
            currency = get_currency_symbol(code) if code else detect_currency(text, url)
            return PriceInfo(price=parse_price(text), currency=currency)
    return None


def product_images(soup: BeautifulSoup, url: str) -> List[str]:
    """Product media, always served over https."""
    collector = ImageCollector(url, force_https=True)

    product = find_embedded_product(soup)
    if product:
        sources = product.get("images")
        if not sources and isinstance(product.get("media"), list):
            sources = [m.get("src") for m in product["media"] if isinstance(m, dict)]
        for src in sources or []:
            if isinstance(src, dict):
                src = src.get("src")
            if isinstance(src, str):
                collector.add(src)
        if collector.to_list():
            return collector.to_list()

    ld_product = find_json_ld_product(soup)
    if ld_product:
        image = ld_product.get("image")
        for src in image if isinstance(image, list) else [image]:
            if isinstance(src, str):
                collector.add(src)
        if collector.to_list():
            return collector.to_list()

    for selector in (
        ".product__media-list img",
        ".product-gallery img",
        ".product__media img",
        ".product-single__photo img",
        "div[data-product-images] img",
        "scroll-carousel div.product-gallery__media img",
    ):
        for img in soup.select(selector):
            collector.add(image_source(img))
        if collector.to_list():
            break
    return collector.to_list()


def _json_variants(product: dict, option: str, url: str) -> List[ProductVariant]:
    options = product.get("options") or []
    names = [o.get("name") if isinstance(o, dict) else o for o in options]
    index = next(
        (i for i, name in enumerate(names) if isinstance(name, str) and name.lower() in _option_aliases(option)),
        None,
    )
    if index is None:
        return []

    variants: List[ProductVariant] = []
    availability: dict = {}
    for variant in product.get("variants") or []:
        if not isinstance(variant, dict):
            continue
        value = variant.get(f"option{index + 1}")
        if not isinstance(value, str) or not value.strip():
            continue
        name = clean_text(value)
        available = bool(variant.get("available"))
        if name in availability:
            # A color is available if any of its sizes is
            availability[name] = availability[name] or available
            continue
        availability[name] = available
        swatch = None
        if option == "color":
            featured = variant.get("featured_image")
            if isinstance(featured, dict):
                swatch = make_absolute_url(featured.get("src"), url)
        variants.append(ProductVariant(name=name, swatch_url=swatch, available=available))

    return [v.model_copy(update={"available": availability[v.name]}) for v in variants]


def _option_aliases(option: str) -> tuple:
    if option == "color":
        return ("color", "colour")
    return (option,)


def _select_variants(soup: BeautifulSoup, option: str, selector: str) -> List[ProductVariant]:
    variants: List[ProductVariant] = []
    seen = set()
    for select in soup.select(selector):
        select_id = select.get("id")
        label = soup.select_one(f"label[for='{select_id}']") if select_id else None
        label_text = clean_text(label.get_text(" ")).lower() if label else ""
        name_attr = (select.get("name") or "").lower()
        if not any(alias in label_text or alias in name_attr for alias in _option_aliases(option)):
            continue
        for opt in select.find_all("option"):
            name = clean_text(opt.get("value") or opt.get_text(" "))
            text = opt.get_text(" ").lower()
            if not name or name.lower().startswith("select") or name in seen:
                continue
            sold_out = "sold out" in text or "unavailable" in text
            variants.append(ProductVariant(name=name, available=not (is_disabled(opt) or sold_out)))
            seen.add(name)
        if variants:
            break
    return variants


def _label_variants(soup: BeautifulSoup, option: str, selector: str, url: str) -> List[ProductVariant]:
    variants: List[ProductVariant] = []
    seen = set()
    for label in soup.select(selector):
        value_el = label.select_one("span.product-form__swatch-value, .swatch-element__tooltip")
        name = clean_text(value_el.get_text(" ") if value_el else label.get_text(" "))
        if not name:
            field = label.find("input")
            name = clean_text(field.get("value")) if field else ""
        if not name or name.lower() == option or name in seen:
            continue
        input_id = label.get("for")
        field = soup.find(id=input_id) if input_id else label.find("input")
        sold_out = (
            (field is not None and is_disabled(field))
            or any(has_class(label, cls) for cls in SOLD_OUT_CLASSES)
            or label.select_one("span.product-form__swatch-value--sold-out") is not None
        )
        swatch = None
        if option == "color":
            img = label.find("img")
            swatch = make_absolute_url(image_source(img), url) if img else None
        variants.append(ProductVariant(name=name, swatch_url=swatch, available=not sold_out))
        seen.add(name)
    return variants


def product_variants(soup: BeautifulSoup, url: str, option: str) -> List[ProductVariant]:
    """Variants for one option ("color" or "size"): product JSON, then <select>, then swatch labels."""
    product = find_embedded_product(soup)
    if product:
        variants = _json_variants(product, option, url)
        if variants:
            return variants

    select_selector, label_selector = _option_selectors(option)
    variants = _select_variants(soup, option, select_selector)
    if variants:
        return variants
    return _label_variants(soup, option, label_selector, url)
