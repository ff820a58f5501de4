"""Wishlist item model: a tracked product and its price history."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wishlist_tracker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from wishlist_tracker.schemas.wishlist import PriceHistoryEntry

DEFAULT_CATEGORY = "Extra"


class WishlistItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Product the user tracks for price drops and restocks.

    ``price`` always equals the price of the last ``price_history`` entry.
    The history is append-only; JSON columns are reassigned (never mutated
    in place) so SQLAlchemy notices the change.
    """

    __tablename__ = "wishlist_items"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="$")

    url: Mapped[str] = mapped_column(Text, nullable=False)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Categorization
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_CATEGORY, index=True
    )
    subcategory: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    custom_category_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Availability and variants
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    colors: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    sizes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    selected_color: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    selected_size: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    price_history: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    @property
    def history_entries(self) -> List[PriceHistoryEntry]:
        """Price history parsed into typed entries, oldest first."""
        return [PriceHistoryEntry.model_validate(entry) for entry in self.price_history or []]

    def __repr__(self) -> str:
        return f"<WishlistItem(id={self.id}, title='{self.title[:50]}', price={self.price})>"
