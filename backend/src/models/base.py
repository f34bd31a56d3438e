"""
Base Pydantic models and response schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field


class BaseModel(PydanticBaseModel):
    """Base Pydantic model with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        arbitrary_types_allowed=True,
    )


class TimestampMixin(BaseModel):
    """Mixin for models with created_at and updated_at timestamps."""

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class IDMixin(BaseModel):
    """Mixin for models with an integer surrogate identifier."""

    id: int = Field(..., description="Internal identifier")


class PaginationMeta(BaseModel):
    """Pagination metadata for 0-indexed pages."""

    page: int = Field(..., description="Current page number (0-indexed)", ge=0)
    page_size: int = Field(..., description="Items per page", ge=1)
    total_items: int = Field(..., description="Total number of items", ge=0)
    total_pages: int = Field(..., description="Total number of pages", ge=0)
    has_next: bool = Field(..., description="Whether there is a next page")
    has_previous: bool = Field(..., description="Whether there is a previous page")
    page_start: int = Field(..., description="1-indexed position of the first row shown", ge=0)
    page_end: int = Field(..., description="1-indexed position of the last row shown", ge=0)


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(..., description="Human-readable error message")
    error_code: Optional[str] = Field(None, description="Machine-readable error code")
    request_id: Optional[str] = Field(None, description="Request correlation ID")


class HealthStatus(BaseModel):
    """Health check status."""

    status: str = Field(..., description="Health status (healthy, degraded, unhealthy)")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")


class DetailedHealthStatus(HealthStatus):
    """Detailed health check status with component statuses."""

    components: dict[str, Any] = Field(
        default_factory=dict, description="Component-specific health status"
    )
    version: Optional[str] = Field(None, description="Application version")
    environment: Optional[str] = Field(None, description="Environment name")
