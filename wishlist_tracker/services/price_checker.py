"""Price check orchestration for a single tracked item.

Re-scrapes the item's URL, appends a price history entry when the price
moved by at least one cent, and always refreshes stock state. Every
failure is returned as an unsuccessful ``PriceCheckResult``; nothing
propagates to the caller, so one bad URL never aborts a sweep.
"""

from decimal import Decimal
from typing import Optional, Protocol
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wishlist_tracker.core.exceptions import NotFoundError, WishlistTrackerError
from wishlist_tracker.schemas.price_check import PriceCheckResult
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.schemas.wishlist import PriceHistoryEntry
from wishlist_tracker.services.wishlist_service import WishlistService

logger = structlog.get_logger(__name__)

# Absolute threshold in currency units, independent of the currency.
# A move of exactly one cent counts as a change.
PRICE_CHANGE_EPSILON = Decimal("0.01")

UNEXPECTED_ERROR_CODE = "unexpected_error"


class ProductScraper(Protocol):
    async def scrape(self, url: str) -> ScrapedProduct: ...


def price_change_percent(old_price: Decimal, new_price: Decimal) -> Optional[Decimal]:
    """Unrounded percent change; None when the old price is 0."""
    if old_price <= 0:
        return None
    return (new_price - old_price) / old_price * 100


class PriceChecker:
    """Checks one wishlist item against its live product page.

    Args:
        scraper: Anything with ``async scrape(url) -> ScrapedProduct``
        session_factory: Factory for short-lived database sessions
    """

    def __init__(
        self,
        scraper: ProductScraper,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.scraper = scraper
        self.session_factory = session_factory
        self.logger = logger.bind(service="price_checker")

    async def check_price(self, item_id: UUID) -> PriceCheckResult:
        """Re-scrape an item and record what changed.

        Args:
            item_id: Wishlist item id

        Returns:
            Result describing the change, or the failure reason
        """
        try:
            return await self._check(item_id)
        except WishlistTrackerError as e:
            self.logger.warning(
                "price_check_failed",
                item_id=str(item_id),
                error=e.message,
                error_code=e.code,
            )
            return PriceCheckResult(
                item_id=item_id, success=False, error=e.message, error_code=e.code
            )
        except Exception as e:
            self.logger.error(
                "price_check_unexpected_error",
                item_id=str(item_id),
                error=str(e),
                exc_info=True,
            )
            return PriceCheckResult(
                item_id=item_id,
                success=False,
                error=str(e) or type(e).__name__,
                error_code=UNEXPECTED_ERROR_CODE,
            )

    async def _check(self, item_id: UUID) -> PriceCheckResult:
        # Read and write in separate sessions; no transaction spans the scrape
        async with self.session_factory() as db:
            item = await WishlistService(db).get_item(item_id)
            if item is None:
                raise NotFoundError("WishlistItem", str(item_id))
            url = item.url
            old_price = item.price

        self.logger.info("checking_price", item_id=str(item_id), url=url)
        scraped = await self.scraper.scrape(url)
        new_price = scraped.price

        if new_price <= 0:
            self.logger.warning("price_not_determined", item_id=str(item_id), url=url)
            price_changed = False
        else:
            price_changed = abs(old_price - new_price) >= PRICE_CHANGE_EPSILON

        async with self.session_factory() as db:
            service = WishlistService(db)
            if price_changed:
                entry = PriceHistoryEntry(price=new_price, currency=scraped.currency)
                if await service.append_price_history(item_id, entry) is None:
                    raise self._vanished(item_id)

            updates = {"in_stock": scraped.in_stock}
            if scraped.colors:
                updates["colors"] = scraped.color_names
            if scraped.sizes:
                updates["sizes"] = scraped.size_names
            if await service.update_item(item_id, **updates) is None:
                raise self._vanished(item_id)

        percent = price_change_percent(old_price, new_price) if price_changed else None
        result = PriceCheckResult(
            item_id=item_id,
            success=True,
            price_changed=price_changed,
            price_dropped=price_changed and new_price < old_price,
            old_price=old_price,
            new_price=new_price,
            price_change_percent=percent,
            in_stock=scraped.in_stock,
        )

        self.logger.info(
            "price_checked",
            item_id=str(item_id),
            old_price=str(old_price),
            new_price=str(new_price),
            price_changed=price_changed,
            in_stock=scraped.in_stock,
        )
        return result

    def _vanished(self, item_id: UUID) -> NotFoundError:
        self.logger.warning("price_check_item_vanished", item_id=str(item_id))
        return NotFoundError("WishlistItem", str(item_id))
