"""
Product catalog API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.src.api.schemas.product_schemas import (
    Product,
    ProductCreateRequest,
    ProductPageResponse,
    ProductSearchResponse,
    ProductUpdateRequest,
    SyncResponse,
)
from backend.src.core.database import get_db
from backend.src.core.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    InngestError,
    ResourceNotFoundError,
    ValidationError,
)
from backend.src.core.inngest import send_event
from backend.src.core.logging import get_logger
from backend.src.models.base import ErrorResponse, PaginationMeta
from backend.src.services.catalog_sync_service import catalog_sync_service
from backend.src.services.inngest_functions.sync_catalog import CATALOG_SYNC_EVENT
from backend.src.services.product_service import product_service
from backend.src.services.product_store import ProductPage, product_store

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/products", tags=["Products"])


def _page_response(page: ProductPage) -> ProductPageResponse:
    window = page.window
    return ProductPageResponse(
        products=[Product.model_validate(p) for p in page.products],
        meta=PaginationMeta(
            page=window.page,
            page_size=window.page_size,
            total_items=window.total_items,
            total_pages=window.total_pages,
            has_next=window.has_next,
            has_previous=window.has_previous,
            page_start=page.page_start,
            page_end=page.page_end,
        ),
    )


@router.get(
    "",
    response_model=ProductPageResponse,
    summary="List products",
)
async def list_products(
    page: Optional[int] = Query(None, description="Page number (0-indexed, clamped)"),
    size: Optional[int] = Query(None, description="Items per page (clamped)"),
    db: AsyncSession = Depends(get_db),
) -> ProductPageResponse:
    """
    List products newest first.

    Out-of-range values are clamped rather than rejected: a missing or
    non-positive size uses the default, sizes above the maximum are capped,
    and a page past the end returns the last page.

    Example:
        ```bash
        curl "http://localhost:8000/v1/products?page=0&size=10"
        ```
    """
    logger.info("Loading products", extra={"page": page, "size": size})
    product_page = await product_store.list_page(page, size, db)
    return _page_response(product_page)


@router.get(
    "/search",
    response_model=ProductSearchResponse,
    summary="Search products by title",
)
async def search_products(
    q: Optional[str] = Query(None, description="Case-insensitive title substring"),
    db: AsyncSession = Depends(get_db),
) -> ProductSearchResponse:
    """
    Search products by title.

    A blank term performs no search and returns no rows.

    Example:
        ```bash
        curl "http://localhost:8000/v1/products/search?q=dress"
        ```
    """
    search_term = (q or "").strip()
    logger.info("Searching for products", extra={"search_term": search_term})

    products = await product_store.search(search_term, db)

    return ProductSearchResponse(
        products=[Product.model_validate(p) for p in products],
        search_term=q or "",
        search_performed=bool(search_term),
        match_count=len(products),
    )


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchronize the catalog from the product feed",
)
async def sync_products(
    background: bool = Query(False, description="Queue the sync instead of running it inline"),
    db: AsyncSession = Depends(get_db),
) -> SyncResponse:
    """
    Trigger a catalog sync.

    Inline runs return the run counters. With ``background=true`` the run
    is queued through Inngest and the event IDs are returned.
    Failed inline runs still answer 200 with ``success`` set to false.

    Example:
        ```bash
        curl -X POST http://localhost:8000/v1/products/sync
        ```
    """
    logger.info("Manual product sync triggered", extra={"background": background})

    if background:
        try:
            event_ids = await send_event(
                name=CATALOG_SYNC_EVENT,
                data={"requested_by": "api"},
            )
        except InngestError as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=e.message,
            )
        return SyncResponse(
            success=True,
            message="Product sync queued.",
            event_ids=event_ids,
        )

    try:
        summary = await catalog_sync_service.sync_catalog(db=db, trigger="manual")
    except (DatabaseError, SQLAlchemyError) as e:
        await db.rollback()
        error = e.message if isinstance(e, DatabaseError) else str(e)
        logger.error(
            "Error during product sync",
            extra={"trigger": "manual", "error": error},
            exc_info=True,
        )
        return SyncResponse(
            success=False,
            message=f"Error syncing products: {error}",
        )

    if summary.status != "completed":
        return SyncResponse(
            success=False,
            message=f"Error syncing products: {summary.error}",
            summary=summary,
        )

    return SyncResponse(
        success=True,
        message=f"Products synced successfully! Total products: {summary.total}",
        summary=summary,
    )


@router.get(
    "/{product_id}",
    response_model=Product,
    summary="Get product details",
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
) -> Product:
    """
    Get a single product with its variants.

    Example:
        ```bash
        curl http://localhost:8000/v1/products/1
        ```
    """
    try:
        product = await product_store.find_by_id(product_id, db)
        return Product.model_validate(product)

    except ResourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product",
    responses={422: {"model": ErrorResponse}},
)
async def create_product(
    request: ProductCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> Product:
    """
    Add a product by hand.

    The product gets one available variant carrying its title and price.

    Example:
        ```bash
        curl -X POST http://localhost:8000/v1/products \\
          -H "Content-Type: application/json" \\
          -d '{"title": "Linen Shirt", "handle": "linen-shirt", "price": "49.90"}'
        ```
    """
    try:
        product = await product_service.create_product(
            title=request.title,
            handle=request.handle,
            price=request.price,
            product_type=request.product_type,
            db=db,
        )
        return Product.model_validate(product)

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )


@router.put(
    "/{product_id}",
    response_model=Product,
    summary="Update a product",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> Product:
    """
    Replace a product's title, handle, price, type and external ID.

    Variants and the creation timestamp are kept.

    Example:
        ```bash
        curl -X PUT http://localhost:8000/v1/products/1 \\
          -H "Content-Type: application/json" \\
          -d '{"title": "Linen Shirt", "handle": "linen-shirt", "price": "39.90",
               "shopify_product_id": "7401234567"}'
        ```
    """
    try:
        product = await product_service.update_product(
            product_id=product_id,
            title=request.title,
            handle=request.handle,
            price=request.price,
            product_type=request.product_type,
            shopify_product_id=request.shopify_product_id,
            db=db,
        )
        return Product.model_validate(product)

    except ResourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )
    except DuplicateResourceError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    responses={404: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a product.

    Example:
        ```bash
        curl -X DELETE http://localhost:8000/v1/products/1
        ```
    """
    try:
        await product_service.delete_product(product_id, db)

    except ResourceNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )


# Export router
__all__ = ["router"]
