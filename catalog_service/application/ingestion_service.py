"""Product ingestion application service.

Pulls the upstream catalog and upserts every product by external ID.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_service.catalog.repository import ProductRepository
from catalog_service.domain.exceptions import DomainError, StorageError
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import async_session_factory, guard_storage
from catalog_service.infrastructure.woocommerce_client import (
    WooCommerceClient,
    WooCommerceProduct,
    get_woocommerce_client,
)

logger = structlog.get_logger()


@dataclass
class IngestionResult:
    """Result of one ingestion run."""

    products: list[WooCommerceProduct] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def count(self) -> int:
        """Number of products ingested."""
        return len(self.products)

    def to_dicts(self) -> list[dict[str, Any]]:
        """Products as plain dictionaries."""
        return [p.to_dict() for p in self.products]


class IngestionService:
    """Service that ingests the upstream catalog into storage.

    Upserts run concurrently, at most ``concurrency`` at a time, each in
    its own session and transaction. The first failed upsert cancels the
    ones still pending and fails the run; products already committed
    stay committed.
    """

    def __init__(
        self,
        client: WooCommerceClient,
        session_factory: async_sessionmaker[AsyncSession],
        concurrency: int = 8,
        storage_timeout: float | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Upstream WooCommerce client.
            session_factory: Factory for per-upsert sessions.
            concurrency: Maximum number of concurrent upserts.
            storage_timeout: Timeout per upsert in seconds.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.session_factory = session_factory
        self.concurrency = concurrency
        self.storage_timeout = storage_timeout

    async def run(self) -> IngestionResult:
        """Run one ingestion.

        Returns:
            The normalized products that were upserted.

        Raises:
            UpstreamFetchError: Fetching or normalizing failed; nothing
                was written.
            StorageError: An upsert failed or timed out.
        """
        started = time.perf_counter()
        logger.info("Starting product ingestion", base_url=self.client.base_url)

        try:
            products = await self.client.list_products()
            await self._upsert_all(products)
        except DomainError as e:
            logger.error(
                "Product ingestion failed",
                error=e.message,
                error_type=type(e).__name__,
                details=e.details,
            )
            raise

        result = IngestionResult(
            products=products,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        logger.info(
            "Product ingestion complete",
            product_count=result.count,
            duration_ms=result.duration_ms,
        )
        return result

    async def _upsert_all(self, products: list[WooCommerceProduct]) -> None:
        """Upsert products with bounded concurrency, failing fast."""
        if not products:
            return

        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(product: WooCommerceProduct) -> None:
            async with semaphore:
                await self._upsert_one(product)

        tasks = [asyncio.create_task(worker(p)) for p in products]
        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_EXCEPTION
            )
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        failed = [t for t in done if not t.cancelled() and t.exception() is not None]
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if failed:
            error = failed[0].exception()
            if isinstance(error, StorageError):
                raise error
            raise StorageError("upsert", str(error)) from error

    async def _upsert_one(self, product: WooCommerceProduct) -> None:
        """Upsert a single product in its own transaction."""
        async with self.session_factory() as session:
            repo = ProductRepository(session)

            async def write() -> None:
                await repo.upsert(product.to_dict())
                await session.commit()

            try:
                await guard_storage("upsert", write(), self.storage_timeout)
            except StorageError as e:
                logger.warning(
                    "Product upsert failed",
                    product_id=product.id,
                    error=e.message,
                )
                raise


def get_ingestion_service(client: WooCommerceClient | None = None) -> IngestionService:
    """Get ingestion service instance.

    Args:
        client: Upstream client; built from settings when omitted.

    Returns:
        IngestionService instance.
    """
    return IngestionService(
        client=client or get_woocommerce_client(),
        session_factory=async_session_factory,
        concurrency=settings.ingestion_concurrency,
        storage_timeout=settings.storage_timeout_seconds,
    )
