"""FastAPI dependencies that build per-request services."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.application.ingestion_service import (
    IngestionService,
    get_ingestion_service,
)
from catalog_service.application.segment_service import SegmentService
from catalog_service.catalog.service import CatalogService
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import get_session
from catalog_service.segments.registry import DEFAULT_REGISTRY


def get_segment_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SegmentService:
    """Get segment service with request ID."""
    return SegmentService(
        session,
        registry=DEFAULT_REGISTRY,
        storage_timeout=settings.storage_timeout_seconds,
        request_id=getattr(request.state, "request_id", None),
    )


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogService:
    """Get catalog service."""
    return CatalogService(session, storage_timeout=settings.storage_timeout_seconds)


async def get_ingestion(request: Request) -> AsyncGenerator[IngestionService, None]:
    """Get ingestion service.

    Uses the application's shared upstream client when the lifespan
    created one; otherwise a per-request client is closed afterwards.
    """
    shared_client = getattr(request.app.state, "woocommerce_client", None)
    service = get_ingestion_service(client=shared_client)
    try:
        yield service
    finally:
        if shared_client is None:
            await service.client.close()
