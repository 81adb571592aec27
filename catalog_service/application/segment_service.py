"""Segment evaluation application service.

Compiles client rules and runs the resulting predicate against the
catalog.
"""

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.catalog.models import Product
from catalog_service.catalog.repository import ProductRepository
from catalog_service.infrastructure.database import guard_storage
from catalog_service.segments.evaluator import CompiledPredicate, evaluate_rules
from catalog_service.segments.registry import DEFAULT_REGISTRY, OPERATORS, FieldRegistry

logger = structlog.get_logger()


class SegmentService:
    """Service for evaluating product segments.

    Example usage:
        async with async_session_factory() as session:
            service = SegmentService(session)
            products = await service.evaluate(["price > 100", "on_sale = true"])
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: FieldRegistry = DEFAULT_REGISTRY,
        storage_timeout: float | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            registry: Field registry rules are validated against.
            storage_timeout: Timeout for the storage query in seconds.
            request_id: Request ID for log correlation.
        """
        self.repository = ProductRepository(session)
        self.registry = registry
        self.storage_timeout = storage_timeout
        self.request_id = request_id

    def compile(self, rules: Any) -> CompiledPredicate:
        """Validate rules and compile them into a predicate.

        Raises:
            SegmentRuleError: On the first invalid rule.
        """
        return evaluate_rules(rules, self.registry)

    async def evaluate(self, rules: Any) -> Sequence[Product]:
        """Evaluate rules and return the matching products.

        No query is issued unless every rule is valid.

        Args:
            rules: List of rule strings.

        Returns:
            Products in the segment, ordered by ID.

        Raises:
            SegmentRuleError: A rule failed validation.
            StorageError: The storage query failed or timed out.
        """
        predicate = self.compile(rules)
        logger.info(
            "Evaluating segment",
            comparisons=predicate.describe(),
            request_id=self.request_id,
        )
        products = await guard_storage(
            "find_matching",
            self.repository.find_matching(predicate),
            self.storage_timeout,
        )
        logger.info(
            "Segment evaluated",
            product_count=len(products),
            request_id=self.request_id,
        )
        return products

    def describe_registry(self) -> dict[str, Any]:
        """Describe the filterable fields and operators."""
        return {
            "fields": self.registry.describe(),
            "operators": list(OPERATORS),
        }
