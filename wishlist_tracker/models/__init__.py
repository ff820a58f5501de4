"""SQLAlchemy models for the wishlist tracker.

All models are imported here so metadata.create_all can discover them.
"""

from wishlist_tracker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from wishlist_tracker.models.wishlist_item import DEFAULT_CATEGORY, WishlistItem

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "DEFAULT_CATEGORY",
    "WishlistItem",
]
