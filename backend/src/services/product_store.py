"""
Product store: persistence, pagination and capacity pruning for the catalog.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.src.core.config import settings
from backend.src.core.exceptions import DatabaseError, ResourceNotFoundError
from backend.src.core.logging import get_logger
from backend.src.core.pagination import PageWindow, resolve_page_window
from backend.src.models.catalog import ProductData
from backend.src.models.product import Product

logger = get_logger(__name__)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class ProductPage:
    """One page of products plus its clamped window."""

    products: List[ProductData]
    window: PageWindow
    page_start: int
    page_end: int


class ProductStore:
    """
    Store for catalog products.

    Every mutation commits on its own, so each write is atomic at the
    single-record (or single-statement) level and nothing spans a whole
    reconciliation run.
    """

    def __init__(
        self,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self.default_page_size = default_page_size or settings.DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE

    async def count(self, db: AsyncSession) -> int:
        """Count stored products."""
        result = await db.execute(select(func.count()).select_from(Product))
        return int(result.scalar_one())

    async def find_page(self, offset: int, limit: int, db: AsyncSession) -> List[ProductData]:
        """
        Fetch a raw slice of products, newest first.

        Args:
            offset: Rows to skip (negative values clamp to 0)
            limit: Rows to return (non-positive returns nothing)
            db: Database session

        Returns:
            Products in the slice
        """
        if limit <= 0:
            return []

        query = (
            select(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(max(offset, 0))
            .limit(limit)
        )
        result = await db.execute(query)
        return [ProductData.model_validate(p) for p in result.scalars().all()]

    async def list_page(
        self,
        page: Optional[int],
        size: Optional[int],
        db: AsyncSession,
    ) -> ProductPage:
        """
        Fetch a clamped page of products.

        Args:
            page: Requested 0-indexed page (None/negative -> 0, past the end -> last page)
            size: Requested page size (None/non-positive -> default, capped at max)
            db: Database session

        Returns:
            ProductPage with the rows and the window actually served
        """
        total = await self.count(db)
        window = resolve_page_window(
            requested_page=page,
            requested_size=size,
            total_items=total,
            default_size=self.default_page_size,
            max_size=self.max_page_size,
        )

        products = await self.find_page(window.offset, window.page_size, db) if total else []
        page_start, page_end = window.bounds(len(products))

        return ProductPage(
            products=products,
            window=window,
            page_start=page_start,
            page_end=page_end,
        )

    async def search(self, term: Optional[str], db: AsyncSession) -> List[ProductData]:
        """
        Case-insensitive substring search on title.

        A blank term returns no rows; search is never "show all".
        """
        trimmed = (term or "").strip()
        if not trimmed:
            return []

        pattern = f"%{escape_like(trimmed)}%"
        query = (
            select(Product)
            .where(Product.title.ilike(pattern, escape="\\"))
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        result = await db.execute(query)
        return [ProductData.model_validate(p) for p in result.scalars().all()]

    async def find_by_id(self, product_id: int, db: AsyncSession) -> ProductData:
        """
        Get product by internal ID.

        Raises:
            ResourceNotFoundError: If no product has that ID
        """
        product = await db.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundError("Product", str(product_id))
        return ProductData.model_validate(product)

    async def find_by_external_id(
        self,
        shopify_product_id: int,
        db: AsyncSession,
    ) -> Optional[ProductData]:
        """Get product by external (feed) ID, or None."""
        result = await db.execute(
            select(Product).where(Product.shopify_product_id == shopify_product_id)
        )
        product = result.scalar_one_or_none()
        return ProductData.model_validate(product) if product else None

    async def upsert(self, product: ProductData, db: AsyncSession) -> ProductData:
        """
        Insert a product without an ID, otherwise replace all fields by ID.

        Both paths stamp ``updated_at``; only insert stamps ``created_at``.

        Args:
            product: Product value to persist
            db: Database session

        Returns:
            The stored product as a new value

        Raises:
            ResourceNotFoundError: If updating an ID that does not exist
            DatabaseError: If the write fails
        """
        now = datetime.utcnow()

        if product.id is None:
            record = Product(
                shopify_product_id=product.shopify_product_id,
                title=product.title,
                handle=product.handle,
                price=product.price,
                product_type=product.product_type,
                variants=list(product.variants),
                created_at=now,
                updated_at=now,
            )
            db.add(record)
            await self._commit(db, "insert")
            await db.refresh(record)

            logger.debug(
                "Product inserted",
                extra={"product_id": record.id, "shopify_product_id": record.shopify_product_id},
            )
            return ProductData.model_validate(record)

        record = await db.get(Product, product.id)
        if record is None:
            raise ResourceNotFoundError("Product", str(product.id))

        record.shopify_product_id = product.shopify_product_id
        record.title = product.title
        record.handle = product.handle
        record.price = product.price
        record.product_type = product.product_type
        record.variants = list(product.variants)
        record.updated_at = now
        await self._commit(db, "update")
        await db.refresh(record)

        logger.debug(
            "Product updated",
            extra={"product_id": record.id, "shopify_product_id": record.shopify_product_id},
        )
        return ProductData.model_validate(record)

    async def delete_by_id(self, product_id: int, db: AsyncSession) -> None:
        """
        Delete one product.

        Raises:
            ResourceNotFoundError: If no product has that ID
        """
        result = await db.execute(
            delete(Product)
            .where(Product.id == product_id)
            .returning(Product.id)
            .execution_options(synchronize_session="fetch")
        )
        if result.scalar_one_or_none() is None:
            await db.rollback()
            raise ResourceNotFoundError("Product", str(product_id))

        await self._commit(db, "delete")
        logger.debug("Product deleted", extra={"product_id": product_id})

    async def prune_excess(self, ceiling: int, db: AsyncSession) -> int:
        """
        Keep only the ``ceiling`` most recently updated products.

        Ordering is ``updated_at`` descending with ties broken by larger ID;
        everything past the first ``ceiling`` rows is deleted in one statement.

        Args:
            ceiling: Number of products to keep
            db: Database session

        Returns:
            Number of products deleted
        """
        if ceiling < 0:
            raise ValueError("ceiling must not be negative")

        overflow = (
            select(Product.id)
            .order_by(Product.updated_at.desc(), Product.id.desc())
            .offset(ceiling)
        )
        result = await db.execute(
            delete(Product)
            .where(Product.id.in_(overflow))
            .returning(Product.id)
            .execution_options(synchronize_session="fetch")
        )
        removed = len(result.scalars().all())
        await self._commit(db, "prune")

        if removed:
            logger.info(
                "Pruned products beyond catalog ceiling",
                extra={"ceiling": ceiling, "removed": removed},
            )
        return removed

    async def _commit(self, db: AsyncSession, action: str) -> None:
        """Commit, rolling back and wrapping database failures."""
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Product write failed",
                extra={"action": action, "error": str(e)},
            )
            raise DatabaseError(f"Failed to {action} product", original_error=e) from e


# Global instance
product_store = ProductStore()
