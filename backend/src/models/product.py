"""
Product data model.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import BigInteger, DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from backend.src.core.database import Base
from backend.src.core.logging import get_logger
from backend.src.models.catalog import ProductVariant

logger = get_logger(__name__)

_variant_list = TypeAdapter(List[ProductVariant])


def decode_variants(value: Any) -> List[ProductVariant]:
    """
    Decode a stored variants blob.

    Anything that is not a JSON list of variant objects is logged and read
    as an empty list.
    """
    if value is None:
        return []

    if isinstance(value, (str, bytes)):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except ValueError as e:
            logger.warning("Failed to parse variants JSON", extra={"error": str(e)})
            return []

    try:
        return _variant_list.validate_python(value)
    except PydanticValidationError as e:
        logger.warning(
            "Stored variants do not match the variant schema",
            extra={"error_count": e.error_count()},
        )
        return []


class VariantList(TypeDecorator):
    """Variants stored as JSONB on PostgreSQL and as JSON text elsewhere."""

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        # Encode failures propagate and fail the write
        payload = [
            ProductVariant.model_validate(variant).model_dump(mode="json")
            for variant in (value or [])
        ]
        if dialect.name == "postgresql":
            return payload
        return json.dumps(payload)

    def process_result_value(self, value, dialect):
        return decode_variants(value)


class Product(Base):
    """Product model representing one catalog entry."""

    __tablename__ = "products"

    # Primary key
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    # Reconciliation join key
    shopify_product_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        unique=True,
    )

    # Product info
    title: Mapped[str] = mapped_column(Text, nullable=False)
    handle: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    product_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    variants: Mapped[List[ProductVariant]] = mapped_column(VariantList, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, title={self.title[:50]}, price={self.price})>"
