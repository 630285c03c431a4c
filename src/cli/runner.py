# src/cli/runner.py

"""Headless CLI front-end over the async search orchestrator."""

import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.listing import NormalizedListing
from src.models.search import SearchRequest
from src.scrapers.browser_session import close_browser_session
from src.services.search_orchestrator import (
    InvalidSearchRequest,
    SearchOrchestrator,
    UnknownSiteError,
    response_to_dict,
    supported_catalog,
)

logger = logging.getLogger("price_scout.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_SERVER_ERROR = 1
EXIT_CLIENT_ERROR = 2


def internal_error_payload(exc: BaseException) -> dict[str, Any]:
    """Generic server-error payload; details only in development mode."""
    return {
        "error": "Internal server error",
        "message": (
            str(exc) if Settings.DEMO_MODE else "Something went wrong"
        ),
    }


def _emit_json(payload: Any) -> None:
    """Write a JSON document to stdout."""
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2, default=str)
    sys.stdout.write("\n")


def _print_table(listings: list[NormalizedListing]) -> None:
    """Render ranked listings as a Rich table on stdout."""
    table = Table(
        title="Price Comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Pctl", justify="right")
    table.add_column("Saves", justify="right", style="yellow")
    table.add_column("Source", style="magenta")
    table.add_column("Link", overflow="fold", style="dim")

    for item in listings:
        saves = (
            f"{item.savings.percentage:.1f}%"
            if item.savings.amount
            else "—"
        )
        table.add_row(
            str(item.rank),
            item.product_name[:60],
            item.display_price,
            str(item.price_rank),
            saves,
            item.source,
            item.link,
        )

    Console().print(table)


async def cli_search(
    query: str,
    country: str,
    min_price: float | None,
    max_price: float | None,
    max_results: int | None,
    output_format: str,
) -> int:
    """Run one search and return an exit code."""
    orchestrator = SearchOrchestrator()
    request = SearchRequest(
        query=query,
        country=country,
        min_price=min_price,
        max_price=max_price,
        max_results=max_results,
    )
    _err.print(
        f"[bold]Searching:[/bold] {query}  [dim]country={country}[/dim]"
    )

    try:
        response = await orchestrator.search(request)
    except InvalidSearchRequest as exc:
        _err.print(f"[red]{exc.message}[/red]")
        _emit_json(exc.to_dict())
        return EXIT_CLIENT_ERROR
    except Exception as exc:
        logger.error("Error in price search: %s", exc, exc_info=True)
        _emit_json(internal_error_payload(exc))
        return EXIT_SERVER_ERROR
    finally:
        await close_browser_session()

    meta = response.metadata
    failed = [r for r in meta.site_reports if not r["listings"]]
    for report in failed:
        _err.print(
            f"[yellow]{report['site']}: {report['error']}[/yellow]"
        )
    _err.print(
        f"[green]✓ {meta.total_results} results"
        f" of {meta.total_found} found"
        f" across {meta.sites_searched} sites"
        f" ({meta.processing_time_ms:.0f}ms)[/green]"
    )

    if output_format == "table":
        if response.results:
            _print_table(response.results)
        else:
            _err.print("[yellow]No products found.[/yellow]")
    else:
        _emit_json(response_to_dict(response))
    return EXIT_OK


def run_supported() -> int:
    """Print supported countries with their currencies and sites."""
    _emit_json(supported_catalog())
    return EXIT_OK


async def run_test_site(site_name: str, query: str, country: str) -> int:
    """Run the fetch strategy against one site and print its listings."""
    orchestrator = SearchOrchestrator()
    try:
        result = await orchestrator.test_site(site_name, query, country)
    except UnknownSiteError as exc:
        _err.print(f"[red]{exc}[/red]")
        _emit_json(
            {"error": "Site not found", "availableSites": exc.available}
        )
        return EXIT_CLIENT_ERROR
    except Exception as exc:
        logger.error("Site test failed: %s", exc, exc_info=True)
        _emit_json({"error": "Site test failed", "message": str(exc)})
        return EXIT_SERVER_ERROR
    finally:
        await close_browser_session()

    _emit_json(
        {
            "site": result.site,
            "query": query,
            "strategy": result.strategy,
            "error": result.error,
            "results": [asdict(listing) for listing in result.listings],
            "count": len(result.listings),
        }
    )
    return EXIT_OK


async def run_compare(query: str, countries_csv: str | None) -> int:
    """Compare a query's prices across countries."""
    countries = (
        [c.strip() for c in countries_csv.split(",") if c.strip()]
        if countries_csv
        else None
    )
    orchestrator = SearchOrchestrator()
    try:
        comparisons = await orchestrator.compare_countries(
            query, countries
        )
    except InvalidSearchRequest as exc:
        _emit_json(exc.to_dict())
        return EXIT_CLIENT_ERROR
    except Exception as exc:
        logger.error("Country comparison failed: %s", exc, exc_info=True)
        _emit_json(internal_error_payload(exc))
        return EXIT_SERVER_ERROR
    finally:
        await close_browser_session()

    _emit_json(
        {
            "query": query,
            "countries": [asdict(c) for c in comparisons],
        }
    )
    return EXIT_OK


async def run_health_check(country: str | None = None) -> int:
    """Run a connectivity health check on catalog sites."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running site health check...[/bold]")
    checker = HealthChecker(country)
    results = await checker.check_all()

    table = Table(
        title="Site Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Site", style="bold")
    table.add_column("Country", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.site, r.country, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
