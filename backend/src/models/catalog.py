"""
Immutable catalog values passed between the store and the services.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from backend.src.models.base import BaseModel


class ProductVariant(BaseModel):
    """A single purchasable variant embedded in a product."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    shopify_variant_id: Optional[int] = Field(None, description="External variant ID")
    title: Optional[str] = Field(None, description="Variant title")
    price: Decimal = Field(default=Decimal("0"), description="Variant price")
    sku: Optional[str] = Field(None, description="Stock keeping unit")
    available: bool = Field(default=False, description="Whether the variant can be bought")


class ProductData(BaseModel):
    """
    Product value.

    ``id`` is None until the store has inserted the product. Writers build a
    new value (``model_copy(update=...)``) instead of mutating one in place.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: Optional[int] = Field(None, description="Internal identifier")
    shopify_product_id: Optional[int] = Field(None, description="External product ID")
    title: str = Field(..., description="Product title")
    handle: str = Field(..., description="URL-safe product slug")
    price: Decimal = Field(..., ge=0, description="Lowest variant price")
    product_type: Optional[str] = Field(None, description="Product type")
    variants: List[ProductVariant] = Field(default_factory=list, description="Variants")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @field_validator("title", "handle")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank titles and handles."""
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v


class SyncSummary(BaseModel):
    """Counters reported by one catalog reconciliation run."""

    status: str = Field(default="completed", description="completed or aborted")
    trigger: str = Field(default="manual", description="What started the run")
    processed: int = Field(default=0, description="Feed entries examined")
    inserted: int = Field(default=0, description="New products stored")
    updated: int = Field(default=0, description="Existing products replaced")
    skipped_invalid: int = Field(default=0, description="Entries rejected by parsing or storage")
    skipped_by_limit: int = Field(default=0, description="New entries dropped for lack of capacity")
    pruned: int = Field(default=0, description="Products deleted to enforce the ceiling")
    total: int = Field(default=0, description="Products stored after the run")
    error: Optional[str] = Field(None, description="Why the run was aborted")
