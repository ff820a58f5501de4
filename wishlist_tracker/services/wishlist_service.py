"""Wishlist service for tracked items and their price history."""

from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_tracker.models.wishlist_item import DEFAULT_CATEGORY, WishlistItem
from wishlist_tracker.schemas.product import ScrapedProduct
from wishlist_tracker.schemas.wishlist import PriceHistoryEntry, WishlistItemCreate
from wishlist_tracker.scrapers.utils.normalizer import quantize_price
from wishlist_tracker.services.categorization import (
    Categorizer,
    CategoryClassifier,
    categorize_with_fallback,
)

logger = structlog.get_logger(__name__)

# Only ever changed through append_price_history
PROTECTED_FIELDS = frozenset({"id", "price", "price_history", "created_at", "updated_at"})


class WishlistService:
    """Storage operations for wishlist items.

    Every mutating method commits, so each update is atomic per item.
    Lookups of missing items return None instead of raising.
    """

    def __init__(self, db: AsyncSession):
        """Initialize wishlist service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="wishlist_service")

    async def get_item(self, item_id: UUID) -> Optional[WishlistItem]:
        return await self.db.get(WishlistItem, item_id)

    async def list_items(self) -> List[WishlistItem]:
        """All tracked items, oldest first."""
        result = await self.db.execute(
            select(WishlistItem).order_by(WishlistItem.created_at, WishlistItem.id)
        )
        return list(result.scalars().all())

    async def list_items_by_category(
        self, category: str, subcategory: Optional[str] = None
    ) -> List[WishlistItem]:
        """Items in a category, optionally narrowed to one subcategory."""
        query = select(WishlistItem).where(WishlistItem.category == category)
        if subcategory:
            query = query.where(WishlistItem.subcategory == subcategory)
        result = await self.db.execute(query.order_by(WishlistItem.created_at))
        return list(result.scalars().all())

    async def create_item(self, data: WishlistItemCreate) -> WishlistItem:
        """Create an item seeded with a single price history entry.

        Args:
            data: Item fields

        Returns:
            Created item
        """
        price = quantize_price(data.price)
        initial_entry = PriceHistoryEntry(price=price, currency=data.currency)

        item = WishlistItem(
            **data.model_dump(exclude={"price"}),
            price=price,
            price_history=[initial_entry.model_dump(mode="json")],
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)

        self.logger.info(
            "wishlist_item_created",
            item_id=str(item.id),
            title=item.title[:50],
            price=str(item.price),
            category=item.category,
        )
        return item

    async def add_scraped_product(
        self,
        scraped: ScrapedProduct,
        manual_category: Optional[str] = None,
        manual_subcategory: Optional[str] = None,
        selected_color: Optional[str] = None,
        selected_size: Optional[str] = None,
        categorizer: Optional[Categorizer] = None,
    ) -> WishlistItem:
        """Start tracking a freshly scraped product.

        A manual category wins; otherwise the categorizer picks one, and any
        categorizer failure files the item under the default category.

        Args:
            scraped: Product as returned by the scraper
            manual_category: Category chosen by the user
            manual_subcategory: Subcategory chosen by the user
            selected_color: Variant the user wants
            selected_size: Variant the user wants
            categorizer: Categorization strategy (keyword classifier by default)

        Returns:
            Created item
        """
        category = manual_category or DEFAULT_CATEGORY
        subcategory = manual_subcategory
        if not manual_category:
            result = categorize_with_fallback(
                categorizer or CategoryClassifier(),
                scraped.title,
                brand=scraped.brand,
                url=scraped.url,
            )
            category, subcategory = result.category, result.subcategory

        data = WishlistItemCreate(
            title=scraped.title,
            brand=scraped.brand,
            price=scraped.price,
            currency=scraped.currency,
            url=scraped.url,
            images=scraped.images,
            category=category,
            subcategory=subcategory,
            in_stock=scraped.in_stock,
            colors=scraped.color_names,
            sizes=scraped.size_names,
            selected_color=selected_color,
            selected_size=selected_size,
        )
        return await self.create_item(data)

    async def update_item(self, item_id: UUID, **fields) -> Optional[WishlistItem]:
        """Update plain fields of an item.

        Returns:
            Updated item, or None if it does not exist

        Raises:
            ValueError: If a protected or unknown field is passed
        """
        protected = PROTECTED_FIELDS.intersection(fields)
        if protected:
            raise ValueError(f"Fields cannot be updated directly: {sorted(protected)}")
        unknown = [name for name in fields if not hasattr(WishlistItem, name)]
        if unknown:
            raise ValueError(f"Unknown fields: {unknown}")

        item = await self.get_item(item_id)
        if item is None:
            self.logger.warning("wishlist_item_not_found", item_id=str(item_id))
            return None

        for name, value in fields.items():
            # JSON columns must be reassigned, not mutated, to be flushed
            setattr(item, name, list(value) if isinstance(value, list) else value)

        await self.db.commit()
        await self.db.refresh(item)
        self.logger.debug("wishlist_item_updated", item_id=str(item_id), fields=sorted(fields))
        return item

    async def append_price_history(
        self, item_id: UUID, entry: PriceHistoryEntry
    ) -> Optional[WishlistItem]:
        """Append a price point and make it the current price.

        Returns:
            Updated item, or None if it does not exist

        Raises:
            ValueError: If the entry predates the latest recorded one
        """
        item = await self.get_item(item_id)
        if item is None:
            self.logger.warning("wishlist_item_not_found", item_id=str(item_id))
            return None

        history = item.history_entries
        if history and entry.recorded_at < history[-1].recorded_at:
            raise ValueError("Price history entries must be appended in chronological order")

        price = quantize_price(entry.price)
        entry = entry.model_copy(update={"price": price})
        item.price_history = [*(item.price_history or []), entry.model_dump(mode="json")]
        item.price = price
        item.currency = entry.currency

        await self.db.commit()
        await self.db.refresh(item)

        self.logger.info(
            "price_history_appended",
            item_id=str(item_id),
            price=str(price),
            entries=len(item.price_history),
        )
        return item

    async def delete_item(self, item_id: UUID) -> bool:
        """Delete an item; returns False if it did not exist."""
        item = await self.get_item(item_id)
        if item is None:
            return False
        await self.db.delete(item)
        await self.db.commit()
        self.logger.info("wishlist_item_deleted", item_id=str(item_id))
        return True
