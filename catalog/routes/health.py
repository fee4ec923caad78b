"""
Catalog Backend: Health Check and Root Routes
==============================================

What:  GET / greets and reports table counts; GET /health probes the
       database for load balancers and container health checks.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from catalog import __version__
from catalog.database import Database, get_db_session
from catalog.dependencies import get_category_service, get_product_service
from catalog.schemas.common import (
    CatalogCounts,
    EntityCount,
    HealthResponse,
    WelcomeResponse,
)
from catalog.services.category_service import CategoryService
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/",
    response_model=WelcomeResponse,
    summary="Welcome message with catalog counts",
)
async def welcome(
    db: AsyncSession = Depends(get_db_session),
    categories: CategoryService = Depends(get_category_service),
    products: ProductService = Depends(get_product_service),
) -> WelcomeResponse:
    category_count = await categories.count(db)
    product_count = await products.count(db)
    return WelcomeResponse(
        message="Welcome to the Catalog API!",
        counts=CatalogCounts(
            categories=EntityCount(count=category_count),
            products=EntityCount(count=product_count),
        ),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports version, database connectivity and uptime.",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check the database with `SELECT 1`.

    Always answers 200; `status` is `unhealthy` when the database cannot be
    reached, so monitors can alert on the body.
    """
    db_status = "connected"
    overall = "healthy"

    database: Database = request.app.state.database
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
