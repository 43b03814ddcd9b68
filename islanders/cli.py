"""
Easy Islanders CLI: command-line interface for the booking lifecycle service.

Usage:
    islanders tick                     # run one lifecycle pass over stored bookings
    islanders run                      # run the lifecycle engine until interrupted
    islanders search [options]         # query the catalog
    islanders catalog export <path>    # write the demo catalog to YAML
    islanders catalog sync [<path>]    # load a catalog into the database
"""

from __future__ import annotations

import asyncio
import logging

import click

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(verbose: bool):
    """Easy Islanders: booking lifecycle CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@cli.command()
def tick():
    """Run a single lifecycle pass."""
    from islanders.config import get_settings

    if get_settings().storage_backend != "database":
        click.echo(
            "Warning: storage_backend is not 'database'; this pass only sees a fresh, empty "
            "in-memory store. Set ISLANDERS_STORAGE_BACKEND=database to advance real bookings.",
            err=True,
        )
    report = asyncio.run(_tick())
    if report.skipped:
        click.echo("Previous tick still running; skipped.")
        return
    click.echo(
        f"✓ scanned={report.scanned} advanced={report.advanced} "
        f"notified={report.notified} failed={report.failed}"
    )


async def _tick():
    from islanders.core.runtime import build_runtime

    runtime = build_runtime()
    return await runtime.engine.tick()


@cli.command()
@click.option("--interval", type=float, default=None, help="Seconds between passes (default from settings)")
def run(interval: float | None):
    """Run the lifecycle engine until interrupted."""
    try:
        asyncio.run(_run(interval))
    except KeyboardInterrupt:
        click.echo("\nStopped.")


async def _run(interval: float | None):
    from islanders.core.runtime import build_runtime

    runtime = build_runtime()
    if interval is not None:
        runtime.engine.interval = interval
    runtime.engine.start()
    click.echo(f"✓ Lifecycle engine running every {runtime.engine.interval}s (Ctrl+C to stop)")
    try:
        await asyncio.Event().wait()
    finally:
        await runtime.engine.stop()


@cli.command()
@click.option("--catalog", "catalog_path", default=None, help="YAML catalog (default: demo catalog)")
@click.option("--domain", default=None)
@click.option("--sub-category", default=None)
@click.option("--location", default=None)
@click.option("--min-price", type=float, default=None)
@click.option("--max-price", type=float, default=None)
@click.option("--amenity", "amenities", multiple=True, help="Required amenity (repeatable)")
@click.option("--query", "-q", default=None, help="Free-text match on title and tags")
@click.option("--sort-by", type=click.Choice(["price_asc", "price_desc", "rating"]), default=None)
@click.option("--limit", type=int, default=20, show_default=True)
def search(catalog_path, domain, sub_category, location, min_price, max_price, amenities, query, sort_by, limit):
    """Search the catalog."""
    from islanders.core.catalog_loader import generate_mock_catalog, load_catalog
    from islanders.core.schemas import SearchQuery
    from islanders.core.search import search_catalog

    items = load_catalog(catalog_path) if catalog_path else generate_mock_catalog()
    q = SearchQuery(
        domain=domain,
        sub_category=sub_category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        amenities=list(amenities),
        query=query,
        sort_by=sort_by,
    )
    results = search_catalog(items, q)

    if not results:
        click.echo("No matching items.")
        return

    click.echo(f"{'ID':<12} {'Domain':<16} {'Price':>10}  Title")
    click.echo("-" * 70)
    for item in results[:limit]:
        click.echo(f"{item.id:<12} {item.domain:<16} {item.price:>10.2f}  {item.title}")
    if len(results) > limit:
        click.echo(f"... {len(results) - limit} more")


@cli.group()
def catalog():
    """Manage catalog fixtures."""


@catalog.command("export")
@click.argument("path")
@click.option("--per-domain", type=int, default=50, show_default=True)
def catalog_export(path: str, per_domain: int):
    """Write the demo catalog to a YAML file."""
    from islanders.core.catalog_loader import dump_catalog, generate_mock_catalog

    items = generate_mock_catalog(per_domain=per_domain)
    dump_catalog(items, path)
    click.echo(f"✓ Wrote {len(items)} items to {path}")


@catalog.command("sync")
@click.argument("path", required=False)
def catalog_sync(path: str | None):
    """Load a YAML catalog (or the demo catalog) into the database."""
    count = asyncio.run(_catalog_sync(path))
    click.echo(f"✓ Synced {count} items")


async def _catalog_sync(path: str | None) -> int:
    from islanders.core.catalog_loader import generate_mock_catalog, load_catalog
    from islanders.core.crud import SqlCatalogStore
    from islanders.db import async_session

    items = load_catalog(path) if path else generate_mock_catalog()
    return await SqlCatalogStore(async_session).upsert_items(items)


if __name__ == "__main__":
    cli()
