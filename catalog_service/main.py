"""Product segments API application.

Wires the routers, middleware and exception handlers into one FastAPI
app. The lifespan prepares storage, opens the shared WooCommerce client
and starts periodic ingestion.

Run with:
    uvicorn catalog_service.main:app
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_service.api.errors import register_exception_handlers
from catalog_service.api.health import router as health_router
from catalog_service.api.middleware import setup_middleware
from catalog_service.api.products import router as products_router
from catalog_service.api.segments import router as segments_router
from catalog_service.application.scheduler import ingestion_scheduler_loop
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import create_tables, engine
from catalog_service.infrastructure.logging_config import configure_logging
from catalog_service.infrastructure.woocommerce_client import get_woocommerce_client

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Prepare and release process-wide resources.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the server while the app is serving.
    """
    configure_logging()
    logger.info(
        "Starting product segments API",
        version=settings.api_version,
        debug=settings.debug,
        ingestion_enabled=settings.ingestion_enabled,
    )

    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables ready")

    # Shared by manual ingestion requests; the scheduler opens its own.
    client = get_woocommerce_client()
    app.state.woocommerce_client = client

    scheduler_task: asyncio.Task | None = None
    if settings.ingestion_enabled:
        scheduler_task = asyncio.create_task(
            ingestion_scheduler_loop(settings.ingestion_interval_seconds)
        )

    yield

    logger.info("Shutting down product segments API")
    if scheduler_task is not None:
        scheduler_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task
    await client.close()
    app.state.woocommerce_client = None
    await engine.dispose()


app = FastAPI(
    title="Product Segments API",
    description="WooCommerce product catalog with rule-based segment filtering",
    version=settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
setup_middleware(app)
register_exception_handlers(app)

app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(segments_router)
