"""
Product pydantic models.
"""

import math
import time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def coerce_price(value: Any) -> float:
    """Turn any input into a price; anything that is not a finite number becomes 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class SortOrder(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOrder":
        """Unknown or missing values fall back to newest first."""
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., gt=0)
    title: str
    description: str = ""
    price: float = 0.0
    category: str
    subcategory: str = ""
    images: list[str] = Field(default_factory=list)
    likes: int = Field(0, ge=0)
    dislikes: int = Field(0, ge=0)
    created_at: int = Field(default_factory=now_ms, alias="createdAt")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ProductCreate(BaseModel):
    """Body of POST /products. Presence of title and category is checked by the repository."""

    title: Optional[str] = None
    description: Optional[str] = None
    price: float = 0.0
    category: Optional[str] = None
    subcategory: Optional[str] = None
    images: list[str] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return coerce_price(value)

    @field_validator("images", mode="before")
    @classmethod
    def _coerce_images(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []


class ProductPatch(BaseModel):
    """Body of PUT /products/{id}. The id is not a field, so it can never be overwritten."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    images: Optional[list[str]] = None
    likes: Optional[int] = Field(None, ge=0)
    dislikes: Optional[int] = Field(None, ge=0)
    created_at: Optional[int] = Field(None, alias="createdAt")

    def changes(self) -> dict[str, Any]:
        """Fields present in the request body, keyed by their wire names. Explicit nulls are skipped."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
