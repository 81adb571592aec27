"""Tests for the product repository."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_service.catalog.repository import ProductRepository, build_condition
from catalog_service.segments.evaluator import Comparison, evaluate_rules
from catalog_service.segments.registry import Operator

ProductData = Callable[..., dict[str, Any]]


@pytest.fixture
async def seeded(session: AsyncSession, product_data: ProductData) -> ProductRepository:
    """Repository over a small, varied catalog."""
    repo = ProductRepository(session)
    for data in [
        product_data(
            1,
            title="Budget Earbuds",
            price=25.0,
            category="Audio",
            stock_status="instock",
            on_sale=True,
            created_at=datetime(2023, 1, 10, 9, 30),
        ),
        product_data(
            2,
            title="Studio Headphones",
            price=250.0,
            category="Audio",
            stock_status="outofstock",
            stock_quantity=0,
            created_at=datetime(2023, 7, 1, 0, 0),
        ),
        product_data(
            3,
            title="Mystery Box",
            price=60.0,
            category=None,
            stock_quantity=None,
            created_at=None,
        ),
        product_data(
            4,
            title="4K Monitor",
            price=499.99,
            category="Displays",
            on_sale=True,
            created_at=datetime(2024, 2, 29, 18, 0),
        ),
    ]:
        await repo.upsert(data)
    await session.commit()
    return repo


async def _ids(repo: ProductRepository, rules: list[str]) -> list[int]:
    products = await repo.find_matching(evaluate_rules(rules))
    return [p.id for p in products]


class TestUpsert:
    """Tests for upsert by external ID."""

    @pytest.mark.asyncio
    async def test_inserts_new_product(
        self, session: AsyncSession, product_data: ProductData
    ) -> None:
        """A new ID creates a row."""
        repo = ProductRepository(session)
        product = await repo.upsert(product_data(7, tags=["a", "b"]))
        await session.commit()

        assert product.id == 7
        assert product.tags == ["a", "b"]
        assert product.ingested_at is not None
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_reingest_overwrites_single_record(
        self, session_factory, product_data: ProductData
    ) -> None:
        """Upserting the same ID twice keeps one row with the second values."""
        async with session_factory() as session:
            await ProductRepository(session).upsert(
                product_data(5, price=10.0, category="Books", tags=["x"])
            )
            await session.commit()

        async with session_factory() as session:
            await ProductRepository(session).upsert(
                product_data(5, price=12.5, category=None, tags=["y", "z"], on_sale=True)
            )
            await session.commit()

        async with session_factory() as session:
            repo = ProductRepository(session)
            assert await repo.count() == 1
            product = await repo.get_by_id(5)
            assert product is not None
            assert product.price == 12.5
            assert product.category is None
            assert product.tags == ["y", "z"]
            assert product.on_sale is True

    @pytest.mark.asyncio
    async def test_missing_tags_stored_empty(
        self, session: AsyncSession, product_data: ProductData
    ) -> None:
        repo = ProductRepository(session)
        product = await repo.upsert(product_data(8, tags=None))
        assert product.tags == []

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, session: AsyncSession) -> None:
        assert await ProductRepository(session).get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_concurrent_writers_same_new_id(
        self, session_factory, product_data: ProductData
    ) -> None:
        """Two sessions inserting the same new ID both succeed."""

        async def write(price: float) -> None:
            async with session_factory() as session:
                await ProductRepository(session).upsert(product_data(9, price=price))
                await session.commit()

        await asyncio.gather(write(10.0), write(20.0))

        async with session_factory() as session:
            repo = ProductRepository(session)
            assert await repo.count() == 1
            product = await repo.get_by_id(9)
        assert product.price in (10.0, 20.0)

    @pytest.mark.asyncio
    async def test_upsert_refreshes_loaded_instance(
        self, session: AsyncSession, product_data: ProductData
    ) -> None:
        """An instance already in the session reflects the new values."""
        repo = ProductRepository(session)
        first = await repo.upsert(product_data(11, price=1.0))
        second = await repo.upsert(product_data(11, price=2.0, tags=["fresh"]))

        assert second is first
        assert second.price == 2.0
        assert second.tags == ["fresh"]
        assert await repo.count() == 1


class TestFindMatching:
    """Tests for predicate queries."""

    @pytest.mark.asyncio
    async def test_empty_predicate_returns_all(self, seeded: ProductRepository) -> None:
        """No rules return every product, ordered by ID."""
        assert await _ids(seeded, []) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_number_comparison(self, seeded: ProductRepository) -> None:
        assert await _ids(seeded, ["price > 50"]) == [2, 3, 4]
        assert await _ids(seeded, ["price <= 60"]) == [1, 3]

    @pytest.mark.asyncio
    async def test_string_equality(self, seeded: ProductRepository) -> None:
        assert await _ids(seeded, ["category = Audio"]) == [1, 2]

    @pytest.mark.asyncio
    async def test_not_equal_matches_null(self, seeded: ProductRepository) -> None:
        """Products without a value satisfy '!='."""
        assert await _ids(seeded, ["category != Audio"]) == [3, 4]

    @pytest.mark.asyncio
    async def test_boolean(self, seeded: ProductRepository) -> None:
        assert await _ids(seeded, ["on_sale = true"]) == [1, 4]
        assert await _ids(seeded, ["on_sale = false"]) == [2, 3]

    @pytest.mark.asyncio
    async def test_date_comparison(self, seeded: ProductRepository) -> None:
        """Dates compare against local midnight of the given day."""
        assert await _ids(seeded, ["created_at >= 01-07-2023"]) == [2, 4]
        assert await _ids(seeded, ["created_at < 01-07-2023"]) == [1]
        assert await _ids(seeded, ["created_at = 01-07-2023"]) == [2]

    @pytest.mark.asyncio
    async def test_conjunction(self, seeded: ProductRepository) -> None:
        """All comparisons must hold."""
        assert await _ids(seeded, ["category = Audio", "price > 100"]) == [2]
        assert await _ids(seeded, ["on_sale = true", "price > 1000"]) == []

    @pytest.mark.asyncio
    async def test_last_rule_wins(self, seeded: ProductRepository) -> None:
        assert await _ids(seeded, ["price > 1000", "price < 30"]) == [1]

    @pytest.mark.asyncio
    async def test_count_with_predicate(self, seeded: ProductRepository) -> None:
        assert await seeded.count(evaluate_rules(["stock_status = instock"])) == 3
        assert await seeded.count(evaluate_rules([])) == 4


class TestBuildCondition:
    """Tests for comparison translation."""

    def test_unknown_column(self) -> None:
        """Comparisons on columns the model lacks are a programming error."""
        with pytest.raises(ValueError):
            build_condition(Comparison("colour", Operator.EQ, "red"))

    def test_not_equal_includes_null_check(self) -> None:
        condition = build_condition(Comparison("category", Operator.NE, "Audio"))
        assert "IS NULL" in str(condition)
