"""API schemas for the product segments API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    success: bool = Field(default=False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error: str | None = Field(default=None, description="Short error description")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Product as stored in the catalog."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="External product ID", examples=[12345])
    title: str = Field(..., description="Product name", examples=["Premium Wireless Headphones"])
    price: float = Field(..., description="Current price", examples=[199.99])
    regular_price: float = Field(..., description="Price without discounts")
    sale_price: float = Field(..., description="Discounted price")
    stock_status: str = Field(..., description="Availability status", examples=["instock"])
    stock_quantity: int | None = Field(default=None, description="Available quantity")
    category: str | None = Field(default=None, description="First upstream category")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    on_sale: bool = Field(..., description="Whether the product is on sale")
    created_at: datetime | None = Field(default=None, description="Upstream creation time")
    average_rating: float = Field(default=0.0, description="Average rating (0-5)")


class ProductListResponse(BaseModel):
    """List of stored products."""

    success: bool = True
    data: list[ProductSchema]
    message: str = "Products retrieved successfully"
    error: None = None


class ProductResponse(BaseModel):
    """Single stored product."""

    success: bool = True
    data: ProductSchema
    message: str = "Product retrieved successfully"
    error: None = None


class IngestResponse(BaseModel):
    """Result of a manual ingestion run."""

    success: bool = True
    message: str
    count: int = Field(..., description="Number of products ingested")
    data: list[ProductSchema] = Field(default_factory=list)
    error: None = None


# ============================================================================
# Segment Schemas
# ============================================================================


class SegmentEvaluationRequest(BaseModel):
    """Request body for segment evaluation (documentation only).

    The endpoint reads the raw body so that a missing or non-array
    ``rules`` field is reported as a rule error rather than a schema
    error.
    """

    rules: list[str] = Field(
        ...,
        description="Rules of the form '<field> <operator> <value>'",
        examples=[["price > 500", "category = Electronics"]],
    )


class SegmentEvaluationResponse(BaseModel):
    """Products matching a segment."""

    data: list[ProductSchema]
    message: str = "Products retrieved successfully"
    error: None = None


class FieldSchema(BaseModel):
    """Filterable field."""

    field: str
    type: str


class SegmentFieldsResponse(BaseModel):
    """Filterable fields and supported operators."""

    fields: list[FieldSchema]
    operators: list[str]
