"""
Product service for user-submitted catalog changes.
"""

from decimal import Decimal
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.src.core.exceptions import DuplicateResourceError, ValidationError
from backend.src.core.logging import get_logger
from backend.src.models.catalog import ProductData, ProductVariant
from backend.src.services.feed_parser import parse_external_id
from backend.src.services.product_store import ProductStore, product_store

logger = get_logger(__name__)


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


class ProductService:
    """Service for creating, editing and deleting products by hand."""

    def __init__(self, store: Optional[ProductStore] = None):
        self.store = store or product_store

    async def create_product(
        self,
        title: str,
        handle: str,
        price: Decimal,
        product_type: Optional[str],
        db: AsyncSession,
    ) -> ProductData:
        """
        Create a product with a single available variant.

        Args:
            title: Product title
            handle: URL slug
            price: Price (also used for the variant)
            product_type: Optional product type
            db: Database session

        Returns:
            Stored product

        Raises:
            ValidationError: If title/handle are blank or price is negative
        """
        self._check_price(price)
        title = title.strip()

        try:
            product = ProductData(
                title=title,
                handle=handle.strip(),
                price=price,
                product_type=_clean_optional(product_type),
                variants=[ProductVariant(title=title, price=price, available=True)],
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid product", errors=e.errors(include_url=False)) from e

        created = await self.store.upsert(product, db)

        logger.info(
            "Product created",
            extra={"product_id": created.id, "title": created.title},
        )
        return created

    async def update_product(
        self,
        product_id: int,
        title: str,
        handle: str,
        price: Decimal,
        product_type: Optional[str],
        shopify_product_id: Optional[str],
        db: AsyncSession,
    ) -> ProductData:
        """
        Replace a product's scalar fields; variants and created_at are kept.

        Args:
            product_id: Internal product ID
            title: New title
            handle: New handle
            price: New price (must not be negative)
            product_type: New product type (blank clears it)
            shopify_product_id: External ID as typed by the user (blank clears it)
            db: Database session

        Returns:
            Updated product

        Raises:
            ResourceNotFoundError: If the product does not exist
            ValidationError: If the external ID is not a positive 64-bit number
                or price is negative
            DuplicateResourceError: If another product already has the external ID
        """
        current = await self.store.find_by_id(product_id, db)

        external_id: Optional[int] = None
        cleaned_external_id = _clean_optional(shopify_product_id)
        if cleaned_external_id is not None:
            external_id = parse_external_id(cleaned_external_id)
            if external_id is None:
                raise ValidationError("Shopify product ID must be a number.")

        self._check_price(price)

        if external_id is not None and external_id != current.shopify_product_id:
            other = await self.store.find_by_external_id(external_id, db)
            if other is not None and other.id != product_id:
                raise DuplicateResourceError("Product", identifier=str(external_id))

        try:
            replacement = ProductData.model_validate(
                {
                    **current.model_dump(),
                    "shopify_product_id": external_id,
                    "title": title.strip(),
                    "handle": handle.strip(),
                    "price": price,
                    "product_type": _clean_optional(product_type),
                }
            )
        except PydanticValidationError as e:
            raise ValidationError("Invalid product", errors=e.errors(include_url=False)) from e

        updated = await self.store.upsert(replacement, db)

        logger.info(
            "Product updated",
            extra={"product_id": product_id, "shopify_product_id": external_id},
        )
        return updated

    async def delete_product(self, product_id: int, db: AsyncSession) -> ProductData:
        """
        Delete a product.

        Returns:
            The product as it was before deletion

        Raises:
            ResourceNotFoundError: If the product does not exist
        """
        product = await self.store.find_by_id(product_id, db)
        await self.store.delete_by_id(product_id, db)

        logger.info(
            "Product deleted",
            extra={"product_id": product_id, "title": product.title},
        )
        return product

    @staticmethod
    def _check_price(price: Decimal) -> None:
        if price < 0:
            raise ValidationError("Price cannot be negative.")


# Global instance
product_service = ProductService()
