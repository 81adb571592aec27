"""Product repository for database operations.

Provides upsert-by-external-id for ingestion and predicate-based
lookups for segment evaluation.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.catalog.models import Product
from catalog_service.segments.evaluator import CompiledPredicate, Comparison
from catalog_service.segments.registry import Operator

# Columns written by ingestion; everything else is bookkeeping.
PRODUCT_FIELDS = (
    "title",
    "price",
    "regular_price",
    "sale_price",
    "stock_status",
    "stock_quantity",
    "category",
    "tags",
    "on_sale",
    "created_at",
    "average_rating",
)

# Dialects with INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class ProductRepository:
    """Repository for Product database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            predicate = evaluate_rules(["price > 100"])
            products = await repo.find_matching(predicate)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get_by_id(self, product_id: int) -> Product | None:
        """Get product by external ID.

        Args:
            product_id: External product ID.

        Returns:
            Product if found, None otherwise.
        """
        return await self.session.get(Product, product_id)

    async def upsert(self, data: dict[str, Any]) -> Product:
        """Insert a product or overwrite the stored one with the same ID.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE, so concurrent
        writers of the same ID never collide on the primary key. Every
        mutable field is overwritten, including fields that are None in
        ``data``.

        Args:
            data: Normalized product fields, including ``id``.

        Returns:
            The stored product.

        Raises:
            ValueError: The database dialect has no ON CONFLICT upsert.
        """
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ValueError(f"Upsert is not supported on dialect '{dialect}'")

        values = {name: data.get(name) for name in PRODUCT_FIELDS}
        if values["tags"] is None:
            values["tags"] = []

        # Python-side onupdate does not fire for ON CONFLICT updates.
        stmt = insert(Product).values(id=data["id"], **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Product.id],
            set_={**values, "updated_at": datetime.now(timezone.utc)},
        )
        await self.session.execute(stmt)

        return await self.session.get(Product, data["id"], populate_existing=True)

    async def find_all(self) -> Sequence[Product]:
        """Get every stored product, ordered by ID."""
        result = await self.session.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    async def find_matching(self, predicate: CompiledPredicate) -> Sequence[Product]:
        """Find products matching every comparison of a predicate.

        Args:
            predicate: Compiled segment predicate.

        Returns:
            Matching products ordered by ID.
        """
        query = select(Product)
        conditions = build_conditions(predicate)
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.session.execute(query.order_by(Product.id))
        return result.scalars().all()

    async def count(self, predicate: CompiledPredicate | None = None) -> int:
        """Count products, optionally restricted to a predicate."""
        query = select(func.count(Product.id))
        if predicate is not None:
            conditions = build_conditions(predicate)
            if conditions:
                query = query.where(and_(*conditions))
        result = await self.session.execute(query)
        return result.scalar_one()


def build_condition(comparison: Comparison) -> Any:
    """Translate one comparison into a SQLAlchemy boolean expression.

    ``!=`` also matches NULL, so a product with no category satisfies
    ``category != Books``.
    """
    column = getattr(Product, comparison.field, None)
    if column is None:
        raise ValueError(f"Product has no column '{comparison.field}'")

    condition = comparison.operator.apply(column, comparison.value)
    if comparison.operator is Operator.NE:
        condition = or_(condition, column.is_(None))
    return condition


def build_conditions(predicate: CompiledPredicate) -> list[Any]:
    """Translate every comparison of a predicate, in field order."""
    return [build_condition(comparison) for comparison in predicate]
