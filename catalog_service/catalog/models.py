"""SQLAlchemy models for the product catalog.

Defines the Product table that ingestion writes and segment
evaluation reads.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog_service.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """Product entity in the catalog.

    Mirrors one product of the upstream WooCommerce store.

    Attributes:
        id: External product identifier assigned by the upstream store.
        title: Product name.
        price: Current price.
        regular_price: Price without discounts.
        sale_price: Discounted price (0 when the product is not on sale).
        stock_status: Availability status (e.g. "instock", "outofstock").
        stock_quantity: Available quantity, None when stock is not tracked.
        category: Name of the first upstream category, if any.
        tags: Tag names in upstream order.
        on_sale: Whether the product is currently on sale.
        created_at: Upstream creation timestamp (store local time).
        average_rating: Average customer rating (0.0-5.0).
        ingested_at: When this service first stored the product.
        updated_at: When this service last rewrote the product.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)
    regular_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    sale_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    stock_status: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    stock_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    category: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    on_sale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    ingested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, title={self.title[:30]}...)>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "regular_price": self.regular_price,
            "sale_price": self.sale_price,
            "stock_status": self.stock_status,
            "stock_quantity": self.stock_quantity,
            "category": self.category,
            "tags": list(self.tags or []),
            "on_sale": self.on_sale,
            "created_at": self.created_at,
            "average_rating": self.average_rating,
        }
