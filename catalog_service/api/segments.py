"""Segment API endpoints.

Provides endpoints for evaluating filter rules against the catalog.
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Body, Depends

from catalog_service.api.dependencies import get_segment_service
from catalog_service.api.errors import failure_to_http, rule_error_to_http
from catalog_service.api.schemas import (
    ErrorResponse,
    FieldSchema,
    ProductSchema,
    SegmentEvaluationRequest,
    SegmentEvaluationResponse,
    SegmentFieldsResponse,
)
from catalog_service.application.segment_service import SegmentService
from catalog_service.domain.exceptions import SegmentRuleError, StorageError

logger = structlog.get_logger()

router = APIRouter(prefix="/segments", tags=["Segments"])


@router.post(
    "/evaluate",
    response_model=SegmentEvaluationResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Evaluate product segment rules",
    description=(
        "Filter products with rules of the form '<field> <operator> <value>'. "
        "Supported operators: =, !=, >, <, >=, <=. Dates use DD-MM-YYYY, "
        "booleans are 'true' or 'false'. When several rules name the same "
        "field, the last one wins."
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": SegmentEvaluationRequest.model_json_schema(),
                },
            },
        },
    },
)
async def evaluate_segment(
    service: Annotated[SegmentService, Depends(get_segment_service)],
    payload: Annotated[Any, Body()] = None,
) -> SegmentEvaluationResponse:
    """Evaluate segment rules.

    Args:
        service: Segment service.
        payload: Raw JSON body, expected to hold a ``rules`` array.

    Returns:
        Matching products.

    Raises:
        HTTPException: 400 for invalid rules, 500 for storage failures.
    """
    rules = payload.get("rules") if isinstance(payload, dict) else None

    try:
        products = await service.evaluate(rules)
    except SegmentRuleError as e:
        logger.info("Rejected segment rules", error=e.message)
        raise rule_error_to_http(e) from e
    except StorageError as e:
        logger.error("Error evaluating segment", error=e.message)
        raise failure_to_http(e, "Failed to evaluate segment") from e

    return SegmentEvaluationResponse(
        data=[ProductSchema.model_validate(p) for p in products],
    )


@router.get(
    "/fields",
    response_model=SegmentFieldsResponse,
    summary="List filterable fields",
    description="Get the fields, value types and operators accepted in rules.",
)
async def list_fields(
    service: Annotated[SegmentService, Depends(get_segment_service)],
) -> SegmentFieldsResponse:
    """Describe the field registry and operator set."""
    description = service.describe_registry()
    return SegmentFieldsResponse(
        fields=[FieldSchema(**f) for f in description["fields"]],
        operators=description["operators"],
    )
