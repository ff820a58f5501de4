"""Site extractor capability sets.

Each supported storefront is described by a ``SiteExtractor``: a bundle of
optional per-field extraction functions plus page acquisition settings.
Capabilities compose per field: a missing (or empty-handed) capability
defers that one field to the generic fallback extractor.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup

from wishlist_tracker.schemas.product import ProductVariant


class Site(str, enum.Enum):
    """Storefronts with dedicated extraction rules."""

    AYM_STUDIO = "aym_studio"
    GIANA_WORLD = "giana_world"
    ZARA = "zara"
    HM = "hm"
    FARFETCH = "farfetch"
    AMAZON = "amazon"
    MYTHERESA = "mytheresa"
    YOOX = "yoox"
    GENERIC = "generic"


@dataclass(frozen=True)
class PriceInfo:
    """Price and currency symbol found on a page."""

    price: Decimal
    currency: str


@dataclass(frozen=True)
class RenderConfig:
    """Headless browser settings for a client-side rendered site.

    Attributes:
        wait_selector: CSS selector that only appears once price/variant data is rendered
        timeout_ms: Navigation and selector wait timeout
        settle_ms: Extra fixed delay after the selector appears
        expand_selector: Optional element clicked before capture (e.g. a size dropdown)
        expand_wait_ms: Delay after clicking ``expand_selector``
    """

    wait_selector: str
    timeout_ms: int = 10_000
    settle_ms: int = 0
    expand_selector: Optional[str] = None
    expand_wait_ms: int = 1_000


# (soup, page_url) -> value; None / empty means "not found here"
TitleExtractor = Callable[[BeautifulSoup, str], Optional[str]]
PriceExtractor = Callable[[BeautifulSoup, str], Optional[PriceInfo]]
ImagesExtractor = Callable[[BeautifulSoup, str], List[str]]
BrandExtractor = Callable[[BeautifulSoup, str], Optional[str]]
VariantsExtractor = Callable[[BeautifulSoup, str], List[ProductVariant]]
StockExtractor = Callable[[BeautifulSoup, str], Optional[bool]]


@dataclass(frozen=True)
class SiteExtractor:
    """Capability set for one storefront.

    Attributes:
        site: Site discriminator
        hostnames: Hostname fragments matched by substring containment
        requires_dynamic_rendering: Product data is injected client-side
        render: Browser settings, required when ``requires_dynamic_rendering``
    """

    site: Site
    hostnames: Tuple[str, ...]
    extract_title: Optional[TitleExtractor] = None
    extract_price: Optional[PriceExtractor] = None
    extract_images: Optional[ImagesExtractor] = None
    extract_brand: Optional[BrandExtractor] = None
    extract_colors: Optional[VariantsExtractor] = None
    extract_sizes: Optional[VariantsExtractor] = None
    extract_stock: Optional[StockExtractor] = None
    requires_dynamic_rendering: bool = False
    render: Optional[RenderConfig] = None

    def matches(self, hostname: str) -> bool:
        """Check whether a (lower-cased) hostname belongs to this site."""
        return any(fragment in hostname for fragment in self.hostnames)

    @property
    def name(self) -> str:
        return self.site.value
