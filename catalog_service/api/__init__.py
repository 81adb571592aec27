"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from catalog_service.api.health import router as health_router
from catalog_service.api.products import router as products_router
from catalog_service.api.segments import router as segments_router

__all__ = [
    "health_router",
    "products_router",
    "segments_router",
]
