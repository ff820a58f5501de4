"""Price check result schema shared by single-item and bulk checks."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class PriceCheckResult(BaseModel):
    """Outcome of re-scraping one tracked item.

    ``error_code`` mirrors the ``code`` of the exception that caused a
    failure so callers can tell timeouts apart from removed products.
    """

    item_id: UUID
    success: bool
    price_changed: bool = False
    price_dropped: Optional[bool] = None
    old_price: Optional[Decimal] = None
    new_price: Optional[Decimal] = None
    price_change_percent: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
