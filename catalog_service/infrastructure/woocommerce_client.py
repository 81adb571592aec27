"""WooCommerce HTTP client for pulling the upstream product catalog.

Fetches raw products from the WooCommerce REST API and normalizes them
into the shape stored by the catalog.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import httpx
import structlog

from catalog_service.domain.exceptions import UpstreamFetchError, UpstreamTimeoutError
from catalog_service.infrastructure.config import settings

logger = structlog.get_logger()

PRODUCTS_PATH = "/wp-json/wc/v3/products"


# ============================================================================
# Normalization
# ============================================================================


def _parse_float(value: Any, name: str, product_id: Any) -> float:
    """Parse a WooCommerce numeric string; empty means zero."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise UpstreamFetchError(
            f"Product {product_id} has non-numeric {name} '{value}'",
            details={"product_id": product_id, "field": name, "value": value},
        ) from None


def _parse_datetime(value: Any, product_id: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into naive local time."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise UpstreamFetchError(
            f"Product {product_id} has invalid date_created '{value}'",
            details={"product_id": product_id, "field": "date_created", "value": value},
        ) from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _parse_terms(value: Any, name: str, product_id: Any) -> list[dict[str, Any]]:
    """Check a category or tag list holds term objects."""
    if not value:
        return []
    if not isinstance(value, list) or not all(isinstance(term, dict) for term in value):
        raise UpstreamFetchError(
            f"Product {product_id} has malformed {name}",
            details={"product_id": product_id, "field": name},
        )
    return value


@dataclass
class WooCommerceProduct:
    """Product from the WooCommerce store, normalized for storage."""

    id: int
    title: str
    price: float
    regular_price: float
    sale_price: float
    stock_status: str
    stock_quantity: int | None
    category: str | None
    tags: list[str] = field(default_factory=list)
    on_sale: bool = False
    created_at: datetime | None = None
    average_rating: float = 0.0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "WooCommerceProduct":
        """Create from a WooCommerce product record.

        The category collapses to the first upstream category name and
        tags are reduced to their names in upstream order.

        Args:
            data: Raw product record.

        Returns:
            WooCommerceProduct instance.

        Raises:
            UpstreamFetchError: If the record lacks an id or name, or
                carries values that cannot be parsed.
        """
        if not isinstance(data, dict) or "id" not in data or not data.get("name"):
            raise UpstreamFetchError(
                "Upstream product record is missing 'id' or 'name'",
                details={"record": data if isinstance(data, dict) else repr(data)},
            )

        product_id = data["id"]
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise UpstreamFetchError(
                f"Upstream product id '{product_id}' is not an integer",
                details={"product_id": product_id},
            ) from None

        categories = _parse_terms(data.get("categories"), "categories", product_id)
        category = categories[0].get("name") if categories else None
        tags = _parse_terms(data.get("tags"), "tags", product_id)

        stock_quantity = data.get("stock_quantity")
        if stock_quantity is not None:
            stock_quantity = int(_parse_float(stock_quantity, "stock_quantity", product_id))

        return cls(
            id=product_id,
            title=data["name"],
            price=_parse_float(data.get("price"), "price", product_id),
            regular_price=_parse_float(data.get("regular_price"), "regular_price", product_id),
            sale_price=_parse_float(data.get("sale_price"), "sale_price", product_id),
            stock_status=data.get("stock_status") or "instock",
            stock_quantity=stock_quantity,
            category=category,
            tags=[tag["name"] for tag in tags if tag.get("name")],
            on_sale=bool(data.get("on_sale", False)),
            created_at=_parse_datetime(data.get("date_created"), product_id),
            average_rating=_parse_float(data.get("average_rating"), "average_rating", product_id),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary accepted by ProductRepository.upsert."""
        return asdict(self)


def normalize_product(raw: dict[str, Any]) -> WooCommerceProduct:
    """Normalize one raw WooCommerce product record."""
    return WooCommerceProduct.from_api_response(raw)


# ============================================================================
# WooCommerce HTTP Client
# ============================================================================


class WooCommerceClient:
    """HTTP client for the WooCommerce REST API.

    Example usage:
        async with get_woocommerce_client() as client:
            products = await client.list_products()
    """

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout: float = 10.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize WooCommerce client.

        Args:
            base_url: Store base URL (without the /wp-json suffix).
            consumer_key: REST API consumer key.
            consumer_secret: REST API consumer secret.
            timeout: Request timeout in seconds.
            page_size: Products requested in the single catalog call.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WooCommerceClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def fetch_raw_products(self) -> list[dict[str, Any]]:
        """Fetch the raw product list in one call.

        Returns:
            Raw product records as sent by WooCommerce.

        Raises:
            UpstreamTimeoutError: The store did not answer in time.
            UpstreamFetchError: Transport error, non-200 status or a
                payload that is not a JSON array.
        """
        params = {
            "consumer_key": self.consumer_key,
            "consumer_secret": self.consumer_secret,
            "per_page": self.page_size,
        }
        try:
            client = await self._get_client()
            response = await client.get(PRODUCTS_PATH, params=params)
        except httpx.TimeoutException as e:
            logger.error(
                "WooCommerce request timed out",
                base_url=self.base_url,
                timeout=self.timeout,
            )
            raise UpstreamTimeoutError(self.timeout) from e
        except httpx.RequestError as e:
            logger.error(
                "WooCommerce request failed",
                base_url=self.base_url,
                error=str(e),
            )
            raise UpstreamFetchError(f"Request failed: {str(e)}") from e

        if response.status_code != 200:
            raise UpstreamFetchError(
                f"Failed to list products: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFetchError("Upstream returned invalid JSON") from e

        if not isinstance(data, list):
            raise UpstreamFetchError(
                "Upstream product list is not a JSON array",
                details={"payload_type": type(data).__name__},
            )
        return data

    async def list_products(self) -> list[WooCommerceProduct]:
        """Fetch and normalize the full upstream product list.

        Returns:
            Normalized products in upstream order.

        Raises:
            UpstreamFetchError: On any fetch or normalization failure.
        """
        raw_products = await self.fetch_raw_products()
        products = [normalize_product(p) for p in raw_products]
        logger.info(
            "Fetched upstream products",
            base_url=self.base_url,
            product_count=len(products),
        )
        return products


def get_woocommerce_client() -> WooCommerceClient:
    """Build a WooCommerce client from settings.

    Returns:
        WooCommerceClient instance.
    """
    return WooCommerceClient(
        base_url=settings.woocommerce_base_url,
        consumer_key=settings.woocommerce_consumer_key,
        consumer_secret=settings.woocommerce_consumer_secret,
        timeout=settings.upstream_timeout_seconds,
        page_size=settings.woocommerce_page_size,
    )
