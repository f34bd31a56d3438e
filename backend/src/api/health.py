"""
Health check endpoints for monitoring service status.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from backend.src.core.config import settings
from backend.src.core.database import get_db
from backend.src.core.logging import get_logger
from backend.src.models.base import DetailedHealthStatus, HealthStatus
from backend.src.services.product_store import product_store

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint.

    Example:
        ```bash
        curl http://localhost:8000/health
        ```
    """
    return HealthStatus(
        status="healthy",
        timestamp=datetime.utcnow(),
    )


@router.get(
    "/v1/health/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_db),
) -> DetailedHealthStatus:
    """
    Detailed health check with component status.

    Checks:
    - Database connectivity
    - Catalog size against the configured ceiling
    """
    components: Dict[str, Any] = {}
    overall_status = "healthy"

    db_status = await check_database_health(db)
    components["database"] = db_status
    if db_status["status"] != "healthy":
        overall_status = "degraded"
        logger.warning("Database health check failed", extra=db_status)
    else:
        product_count = await product_store.count(db)
        components["catalog"] = {
            "status": "healthy",
            "product_count": product_count,
            "max_products": settings.CATALOG_MAX_PRODUCTS,
        }

    components["application"] = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
    }

    return DetailedHealthStatus(
        status=overall_status,
        timestamp=datetime.utcnow(),
        components=components,
        version="0.1.0",
        environment=settings.ENVIRONMENT,
    )


async def check_database_health(db: AsyncSession) -> Dict[str, Any]:
    """
    Check database connectivity and status.

    Args:
        db: Database session

    Returns:
        Health status dictionary
    """
    try:
        result = await db.execute(text("SELECT 1 AS health_check"))
        row = result.fetchone()

        if row and row[0] == 1:
            return {
                "status": "healthy",
                "service": db.bind.dialect.name,
            }
        else:
            return {
                "status": "unhealthy",
                "service": db.bind.dialect.name,
                "error": "Invalid response from database",
            }

    except Exception as e:
        logger.error(
            "Database health check failed",
            extra={"error": str(e)},
            exc_info=True,
        )
        return {
            "status": "unhealthy",
            "service": "database",
            "error": str(e),
        }


@router.get(
    "/v1/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> Dict[str, str]:
    """
    Readiness check for container orchestration.

    Raises:
        HTTPException: If the database is unavailable
    """
    db_status = await check_database_health(db)

    if db_status["status"] != "healthy":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready - database unavailable",
        )

    return {"status": "ready"}


@router.get(
    "/v1/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check() -> Dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}


# Export router
__all__ = ["router"]
