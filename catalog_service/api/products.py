"""Product API endpoints.

Provides endpoints for listing stored products and triggering
ingestion from the upstream store.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from catalog_service.api.dependencies import get_catalog_service, get_ingestion
from catalog_service.api.errors import failure_to_http
from catalog_service.api.schemas import (
    ErrorResponse,
    IngestResponse,
    ProductListResponse,
    ProductResponse,
    ProductSchema,
)
from catalog_service.application.ingestion_service import IngestionService
from catalog_service.catalog.service import CatalogService
from catalog_service.domain.exceptions import IngestionError, StorageError

logger = structlog.get_logger()

router = APIRouter(prefix="/products", tags=["Products"])


@router.get(
    "/ingest",
    response_model=IngestResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Ingest products from the upstream store",
    description="Fetch products from WooCommerce and upsert them by ID.",
)
async def ingest_products(
    service: Annotated[IngestionService, Depends(get_ingestion)],
) -> IngestResponse:
    """Run one ingestion synchronously.

    Returns:
        Count and list of ingested products.

    Raises:
        HTTPException: 500 if fetching or storing fails.
    """
    try:
        result = await service.run()
    except (IngestionError, StorageError) as e:
        raise failure_to_http(e, "Failed to ingest products") from e

    return IngestResponse(
        message=f"{result.count} products ingested successfully",
        count=result.count,
        data=[ProductSchema.model_validate(p) for p in result.to_dicts()],
    )


@router.get(
    "",
    response_model=ProductListResponse,
    responses={500: {"model": ErrorResponse}},
    summary="List products",
    description="Get every stored product, unfiltered.",
)
async def list_products(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ProductListResponse:
    """List all stored products."""
    try:
        products = await service.list_products()
    except StorageError as e:
        logger.error("Error fetching products", error=e.message)
        raise failure_to_http(e, "Failed to fetch products") from e

    return ProductListResponse(
        data=[ProductSchema.model_validate(p) for p in products],
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Get product",
    description="Get a stored product by its external ID.",
)
async def get_product(
    product_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ProductResponse:
    """Get a single stored product.

    Raises:
        HTTPException: 404 if the product is not stored.
    """
    try:
        product = await service.get_product(product_id)
    except StorageError as e:
        logger.error("Error fetching product", product_id=product_id, error=e.message)
        raise failure_to_http(e, "Failed to fetch product") from e

    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": f"Product not found: {product_id}",
                "error": "Product not found",
            },
        )

    return ProductResponse(data=ProductSchema.model_validate(product))
