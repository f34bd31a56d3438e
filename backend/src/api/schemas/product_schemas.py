"""
Pydantic schemas for product listing, search and editing.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from backend.src.models.base import BaseModel, IDMixin, PaginationMeta, TimestampMixin
from backend.src.models.catalog import ProductVariant, SyncSummary


class Product(IDMixin, TimestampMixin):
    """Schema for a stored product."""

    shopify_product_id: Optional[int] = Field(None, description="External product ID")
    title: str = Field(..., description="Product title")
    handle: str = Field(..., description="URL-safe product slug")
    price: Decimal = Field(..., description="Lowest variant price")
    product_type: Optional[str] = Field(None, description="Product type")
    variants: List[ProductVariant] = Field(default_factory=list, description="Variants")


class ProductCreateRequest(BaseModel):
    """Request schema for adding a product by hand."""

    title: str = Field(..., description="Product title", min_length=1, max_length=1000)
    handle: str = Field(..., description="URL-safe product slug", min_length=1, max_length=255)
    price: Decimal = Field(..., description="Product price", max_digits=12, decimal_places=2)
    product_type: Optional[str] = Field(None, description="Product type", max_length=255)


class ProductUpdateRequest(ProductCreateRequest):
    """Request schema for editing a product."""

    shopify_product_id: Optional[str] = Field(
        None,
        description="External product ID (digits only, blank to clear)",
        max_length=20,
    )


class ProductPageResponse(BaseModel):
    """Response schema for a page of products."""

    products: List[Product] = Field(..., description="Products on this page")
    meta: PaginationMeta = Field(..., description="Pagination metadata")


class ProductSearchResponse(BaseModel):
    """Response schema for title search."""

    products: List[Product] = Field(..., description="Matching products")
    search_term: str = Field(..., description="Search term as submitted")
    search_performed: bool = Field(..., description="False when the term was blank")
    match_count: int = Field(..., description="Number of matches")


class SyncResponse(BaseModel):
    """Response schema for an on-demand sync."""

    success: bool = Field(..., description="Whether the run completed")
    message: str = Field(..., description="Human-readable outcome")
    summary: Optional[SyncSummary] = Field(None, description="Run counters (inline runs)")
    event_ids: List[str] = Field(default_factory=list, description="Queued Inngest event IDs")
