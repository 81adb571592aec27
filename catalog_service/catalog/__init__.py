"""Product Catalog.

Persistent product storage shared by ingestion (writer) and segment
evaluation (reader).
"""

from catalog_service.catalog.models import Product
from catalog_service.catalog.repository import (
    PRODUCT_FIELDS,
    ProductRepository,
    build_condition,
    build_conditions,
)
from catalog_service.catalog.service import CatalogService

__all__ = [
    # Models
    "Product",
    # Repository
    "PRODUCT_FIELDS",
    "ProductRepository",
    "build_condition",
    "build_conditions",
    # Service
    "CatalogService",
]
