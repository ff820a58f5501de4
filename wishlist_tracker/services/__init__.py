"""Services for storage, categorization, notifications and price checks."""

from wishlist_tracker.services.categorization import (
    Categorizer,
    CategoryClassifier,
    CategoryResult,
    categorize_with_fallback,
)
from wishlist_tracker.services.notification_service import (
    EmailNotificationService,
    NotificationService,
)
from wishlist_tracker.services.price_checker import PriceChecker
from wishlist_tracker.services.wishlist_service import WishlistService

__all__ = [
    "Categorizer",
    "CategoryClassifier",
    "CategoryResult",
    "categorize_with_fallback",
    "EmailNotificationService",
    "NotificationService",
    "PriceChecker",
    "WishlistService",
]
