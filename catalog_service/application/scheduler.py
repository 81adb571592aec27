"""Periodic ingestion scheduler.

Runs product ingestion on a fixed interval for the lifetime of the
application. Each run is independent: a failed run is logged and the
next one starts on schedule with no carried-over state.
"""

import asyncio
from collections.abc import Callable

import structlog

from catalog_service.application.ingestion_service import (
    IngestionResult,
    IngestionService,
    get_ingestion_service,
)
from catalog_service.domain.exceptions import DomainError

logger = structlog.get_logger()


async def run_scheduled_ingestion(
    service_factory: Callable[[], IngestionService] = get_ingestion_service,
) -> IngestionResult | None:
    """Run one scheduled ingestion, logging instead of raising on failure.

    Returns:
        The ingestion result, or None if the run failed.
    """
    service = service_factory()
    try:
        return await service.run()
    except DomainError as e:
        logger.error(
            "Scheduled ingestion failed",
            error=e.message,
            error_type=type(e).__name__,
        )
        return None
    finally:
        await service.client.close()


async def ingestion_scheduler_loop(
    interval_seconds: float,
    service_factory: Callable[[], IngestionService] = get_ingestion_service,
    max_runs: int | None = None,
) -> None:
    """Run ingestion every ``interval_seconds`` until cancelled.

    Args:
        interval_seconds: Delay between the end of one run and the start
            of the next.
        service_factory: Builds a fresh service for every run.
        max_runs: Stop after this many runs (None runs forever).
    """
    logger.info("Product ingestion scheduler started", interval_seconds=interval_seconds)
    runs = 0
    while max_runs is None or runs < max_runs:
        try:
            await run_scheduled_ingestion(service_factory)
        except Exception:
            logger.exception("Unexpected error in ingestion scheduler")
        runs += 1
        if max_runs is not None and runs >= max_runs:
            break
        await asyncio.sleep(interval_seconds)
