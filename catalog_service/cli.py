"""Command-line product ingestion.

Runs one ingestion from the WooCommerce store outside the web process.

Usage:
    catalog-ingest
    catalog-ingest --create-tables
    catalog-ingest --base-url https://shop.example.com --concurrency 4
"""

import argparse
import asyncio
import sys

from catalog_service.application.ingestion_service import IngestionResult, IngestionService
from catalog_service.domain.exceptions import DomainError
from catalog_service.infrastructure.config import settings
from catalog_service.infrastructure.database import (
    async_session_factory,
    create_tables,
    engine,
)
from catalog_service.infrastructure.logging_config import configure_logging
from catalog_service.infrastructure.woocommerce_client import WooCommerceClient


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="catalog-ingest",
        description="Ingest products from the WooCommerce store",
    )
    parser.add_argument(
        "--base-url",
        default=settings.woocommerce_base_url,
        help="Store base URL (default: from settings)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.ingestion_concurrency,
        help="Maximum concurrent upserts (default: from settings)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create database tables before ingesting",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level (default: from settings)",
    )
    return parser


async def ingest(args: argparse.Namespace) -> IngestionResult:
    """Run one ingestion with the parsed arguments.

    Raises:
        DomainError: Fetching or storing failed.
    """
    if args.create_tables:
        await create_tables()

    client = WooCommerceClient(
        base_url=args.base_url,
        consumer_key=settings.woocommerce_consumer_key,
        consumer_secret=settings.woocommerce_consumer_secret,
        timeout=settings.upstream_timeout_seconds,
        page_size=settings.woocommerce_page_size,
    )
    service = IngestionService(
        client=client,
        session_factory=async_session_factory,
        concurrency=args.concurrency,
        storage_timeout=settings.storage_timeout_seconds,
    )
    try:
        return await service.run()
    finally:
        await client.close()


async def run(argv: list[str] | None = None) -> int:
    """Parse arguments, ingest, and report.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        result = await ingest(args)
    except DomainError as e:
        print(f"Ingestion failed: {e.message}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(f"{result.count} products ingested in {result.duration_ms} ms")
    return 0


def main() -> None:
    """Console entry point."""
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
