"""Application layer module.

Contains application services (use cases) that orchestrate
segment evaluation, ingestion and storage.
"""

from catalog_service.application.ingestion_service import (
    IngestionResult,
    IngestionService,
    get_ingestion_service,
)
from catalog_service.application.scheduler import (
    ingestion_scheduler_loop,
    run_scheduled_ingestion,
)
from catalog_service.application.segment_service import SegmentService

__all__ = [
    "IngestionResult",
    "IngestionService",
    "get_ingestion_service",
    "ingestion_scheduler_loop",
    "run_scheduled_ingestion",
    "SegmentService",
]
