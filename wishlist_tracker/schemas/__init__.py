"""Pydantic schemas for the wishlist tracker.

All data contracts are defined here for easy import.
"""

from wishlist_tracker.schemas.product import MAX_PRODUCT_IMAGES, ProductVariant, ScrapedProduct
from wishlist_tracker.schemas.price_check import PriceCheckResult
from wishlist_tracker.schemas.wishlist import (
    PriceHistoryEntry,
    WishlistItemCreate,
    WishlistItemResponse,
)

__all__ = [
    # Scraping
    "MAX_PRODUCT_IMAGES",
    "ProductVariant",
    "ScrapedProduct",
    # Price checks
    "PriceCheckResult",
    # Wishlist
    "PriceHistoryEntry",
    "WishlistItemCreate",
    "WishlistItemResponse",
]
