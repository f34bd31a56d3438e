"""Data models package."""

from backend.src.models.base import (
    BaseModel,
    DetailedHealthStatus,
    ErrorResponse,
    HealthStatus,
    IDMixin,
    PaginationMeta,
    TimestampMixin,
)
from backend.src.models.catalog import ProductData, ProductVariant, SyncSummary

__all__ = [
    "BaseModel",
    "IDMixin",
    "TimestampMixin",
    "PaginationMeta",
    "ErrorResponse",
    "HealthStatus",
    "DetailedHealthStatus",
    "ProductData",
    "ProductVariant",
    "SyncSummary",
]
