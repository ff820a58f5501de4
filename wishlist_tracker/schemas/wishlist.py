"""Wishlist item Pydantic schemas."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PriceHistoryEntry(BaseModel):
    """Single price point in an item's append-only history."""

    model_config = ConfigDict(from_attributes=True)

    price: Decimal = Field(ge=0)
    currency: str
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("recorded_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class WishlistItemCreate(BaseModel):
    """Payload for creating a tracked item."""

    title: str = Field(min_length=1)
    brand: Optional[str] = None
    price: Decimal = Field(ge=0)
    currency: str = "$"
    url: str
    images: List[str] = Field(default_factory=list)
    category: str = "Extra"
    subcategory: Optional[str] = None
    custom_category_id: Optional[str] = None
    in_stock: bool = True
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None


class WishlistItemResponse(BaseModel):
    """Wishlist item as exposed to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    brand: Optional[str] = None
    price: Decimal
    currency: str
    url: str
    images: List[str]
    category: str
    subcategory: Optional[str] = None
    custom_category_id: Optional[str] = None
    in_stock: bool
    colors: List[str]
    sizes: List[str]
    selected_color: Optional[str] = None
    selected_size: Optional[str] = None
    price_history: List[PriceHistoryEntry]
    created_at: datetime
    updated_at: datetime
