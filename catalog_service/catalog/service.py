"""Catalog service for product reads.

Thin layer over the repository that applies storage timeouts and
error mapping.
"""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.catalog.models import Product
from catalog_service.catalog.repository import ProductRepository
from catalog_service.infrastructure.database import guard_storage


class CatalogService:
    """Service for catalog reads.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)
            products = await service.list_products()
    """

    def __init__(self, session: AsyncSession, storage_timeout: float | None = None) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
            storage_timeout: Timeout per query in seconds.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.storage_timeout = storage_timeout

    async def list_products(self) -> Sequence[Product]:
        """Get every stored product, unfiltered.

        Raises:
            StorageError: The query failed or timed out.
        """
        return await guard_storage(
            "find_all",
            self.repository.find_all(),
            self.storage_timeout,
        )

    async def get_product(self, product_id: int) -> Product | None:
        """Get product by external ID.

        Raises:
            StorageError: The query failed or timed out.
        """
        return await guard_storage(
            "get_by_id",
            self.repository.get_by_id(product_id),
            self.storage_timeout,
        )
