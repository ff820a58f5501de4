"""Per-site extractor capability sets and the generic fallback."""

from wishlist_tracker.scrapers.extractors.aym_studio import AYM_STUDIO_EXTRACTOR
from wishlist_tracker.scrapers.extractors.giana_world import GIANA_WORLD_EXTRACTOR
from wishlist_tracker.scrapers.extractors.zara import ZARA_EXTRACTOR
from wishlist_tracker.scrapers.extractors.hm import HM_EXTRACTOR
from wishlist_tracker.scrapers.extractors.farfetch import FARFETCH_EXTRACTOR
from wishlist_tracker.scrapers.extractors.amazon import AMAZON_EXTRACTOR
from wishlist_tracker.scrapers.extractors.mytheresa import MYTHERESA_EXTRACTOR
from wishlist_tracker.scrapers.extractors.yoox import YOOX_EXTRACTOR

__all__ = [
    "AYM_STUDIO_EXTRACTOR",
    "GIANA_WORLD_EXTRACTOR",
    "ZARA_EXTRACTOR",
    "HM_EXTRACTOR",
    "FARFETCH_EXTRACTOR",
    "AMAZON_EXTRACTOR",
    "MYTHERESA_EXTRACTOR",
    "YOOX_EXTRACTOR",
]
