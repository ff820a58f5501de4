"""Text, price and currency normalization helpers.

Every function here is pure and total: malformed input degrades to an
empty/zero/None result instead of raising, so extractors can call them on
whatever markup a page happens to contain.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional
from urllib.parse import urljoin, urlparse

import structlog

logger = structlog.get_logger(__name__)


_WHITESPACE_RE = re.compile(r"\s+")
_PRICE_CHARS_RE = re.compile(r"[^\d.,]")
_EUROPEAN_DECIMAL_RE = re.compile(r",\d{2}$")

# ISO 4217 code -> display symbol
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "RMB": "¥",
    "INR": "₹",
    "CAD": "C$",
    "AUD": "A$",
    "KRW": "₩",
    "CHF": "CHF",
}

# Checked in order; multi-character dollar prefixes must precede "$"
_TEXT_CURRENCY_MARKERS = [
    (("A$", "AU$"), ("AUD",), "A$"),
    (("C$", "CA$"), ("CAD",), "C$"),
    (("£",), ("GBP",), "£"),
    (("€",), ("EUR",), "€"),
    (("¥", "￥"), ("JPY", "CNY", "RMB"), "¥"),
    (("₹",), ("INR",), "₹"),
    (("₩",), ("KRW",), "₩"),
    (("SFr.", "Fr."), ("CHF",), "CHF"),
    (("$",), ("USD",), "$"),
]

# Country hints found in a hostname TLD or a locale path segment
_REGION_CURRENCIES = {
    "uk": "£",
    "gb": "£",
    "eu": "€",
    "de": "€",
    "fr": "€",
    "es": "€",
    "it": "€",
    "jp": "¥",
    "in": "₹",
    "au": "A$",
    "ca": "C$",
    "cn": "¥",
    "kr": "₩",
    "ch": "CHF",
}

DEFAULT_CURRENCY = "$"


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim.

    Args:
        text: Raw text, possibly None

    Returns:
        Cleaned text, "" for empty input
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def parse_price(text: Optional[str]) -> Decimal:
    """Parse a displayed price string into a Decimal.

    Handles both conventions:
    - "$1,234.56" -> 1234.56
    - "1.234,56 €" -> 1234.56
    - "12,99" -> 12.99

    Args:
        text: Raw price string

    Returns:
        Parsed price, or Decimal("0") if no number is found
    """
    if not text or not isinstance(text, str):
        return Decimal("0")

    cleaned = _PRICE_CHARS_RE.sub("", text)
    if not cleaned:
        return Decimal("0")

    if _EUROPEAN_DECIMAL_RE.search(cleaned):
        cleaned = cleaned.replace(".", "")
        head, _, cents = cleaned.rpartition(",")
        cleaned = head.replace(",", "") + "." + cents
    else:
        cleaned = cleaned.replace(",", "")
        # "1.234.567" has no decimal part, only thousands separators
        if cleaned.count(".") > 1:
            cleaned = cleaned.replace(".", "")

    cleaned = cleaned.strip(".")
    if not cleaned:
        return Decimal("0")

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def detect_currency(text: Optional[str], url: Optional[str] = None) -> str:
    """Guess the currency symbol for a price.

    A symbol or ISO code in the text always wins. Otherwise the URL's TLD
    and locale path segments are used. Defaults to "$".

    Args:
        text: Price text as displayed on the page
        url: Page URL used for regional hints

    Returns:
        Currency symbol such as "$", "€", "£", "C$"
    """
    text = text or ""
    upper = text.upper()
    for symbols, codes, result in _TEXT_CURRENCY_MARKERS:
        if any(symbol in text for symbol in symbols):
            return result
        if any(re.search(rf"\b{code}\b", upper) for code in codes):
            return result

    if url:
        hint = _currency_from_url(url)
        if hint:
            return hint

    return DEFAULT_CURRENCY


def _currency_from_url(url: str) -> Optional[str]:
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.debug("currency_url_unparseable", url=url)
        return None

    hostname = (parsed.hostname or "").lower()
    if hostname:
        tld = hostname.rsplit(".", 1)[-1]
        if tld in _REGION_CURRENCIES:
            return _REGION_CURRENCIES[tld]

    for segment in parsed.path.lower().split("/"):
        if len(segment) > 5:
            continue
        # "en-gb" / "en_gb" locale segments carry the country last
        for part in reversed(re.split(r"[-_]", segment)):
            if part in _REGION_CURRENCIES:
                return _REGION_CURRENCIES[part]
    return None


def get_currency_symbol(code: Optional[str]) -> str:
    """Map an ISO currency code to its symbol.

    Unknown codes are returned unchanged (upper-cased).
    """
    if not code:
        return DEFAULT_CURRENCY
    code = code.strip().upper()
    return CURRENCY_SYMBOLS.get(code, code)


def parse_srcset(value: Optional[str]) -> str:
    """Return the URL of the last (largest) srcset candidate.

    Args:
        value: srcset attribute, e.g. "a.jpg 300w, b.jpg 600w"

    Returns:
        URL of the last candidate, "" if none
    """
    if not value:
        return ""
    candidates = [part.strip() for part in value.split(",") if part.strip()]
    if not candidates:
        return ""
    return candidates[-1].split()[0]


def make_absolute_url(url: Optional[str], base: Optional[str]) -> Optional[str]:
    """Resolve protocol-relative and relative URLs against a base URL.

    Args:
        url: URL as found in the markup
        base: Page URL to resolve against

    Returns:
        Absolute URL, or None for empty or malformed input
    """
    if not url or not isinstance(url, str):
        return None
    url = url.strip()
    if not url:
        return None

    if url.startswith("//"):
        return "https:" + url
    if re.match(r"^https?://", url, re.IGNORECASE) or url.startswith("data:"):
        return url

    if not base:
        return None

    try:
        resolved = urljoin(base, url)
    except ValueError:
        logger.debug("absolute_url_failed", url=url, base=base)
        return None

    if not urlparse(resolved).scheme:
        return None
    return resolved


def quantize_price(price: Decimal) -> Decimal:
    """Round a price to cents for storage."""
    return price.quantize(Decimal("0.01"))
