"""Scraped product Pydantic schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PRODUCT_IMAGES = 5


class ProductVariant(BaseModel):
    """A color or size option offered on a product page."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    swatch_url: Optional[str] = None
    available: Optional[bool] = None


class ScrapedProduct(BaseModel):
    """Structured product data extracted from a single product page.

    A price of 0 means the page did not expose a price; it is a degraded
    result, not an error.
    """

    title: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    currency: str
    images: List[str] = Field(default_factory=list, max_length=MAX_PRODUCT_IMAGES)
    brand: Optional[str] = None
    in_stock: bool = True
    colors: Optional[List[ProductVariant]] = None
    sizes: Optional[List[ProductVariant]] = None
    url: str

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @property
    def color_names(self) -> List[str]:
        return [color.name for color in self.colors or []]

    @property
    def size_names(self) -> List[str]:
        return [size.name for size in self.sizes or []]
