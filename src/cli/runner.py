# src/cli/runner.py

"""Headless CLI search runner and API server launcher."""

import json
import logging
import sys
from pathlib import Path

from openpyxl.utils.exceptions import IllegalCharacterError
from rich.console import Console
from rich.table import Table

from src.adapters.factory import build_adapter
from src.config.settings import Settings
from src.filters.price_parser import effective_price
from src.models.product import ProductRecord
from src.services.search_orchestrator import (
    InvalidQueryError,
    InvalidStoreError,
    SearchMode,
    SearchOrchestrator,
    SearchResponse,
)
from src.storage.spreadsheet_exporter import SpreadsheetExporter

logger = logging.getLogger("precios_cr.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _print_table(response: SearchResponse) -> None:
    """Render a Rich table of records grouped by store."""
    table = Table(
        title=f"Resultados: {response.query}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Tienda", style="magenta")
    table.add_column("Producto", max_width=60)
    table.add_column("Precio Regular", justify="right")
    table.add_column("Precio Promoción", justify="right", style="green")
    table.add_column("URL", overflow="fold", style="dim")

    for records in response.results.values():
        for r in records:
            if r.error is not None:
                table.add_row(
                    r.store,
                    f"[red]Error [Código {r.error.code}]: "
                    f"{r.error.message}[/red]",
                    "-",
                    "-",
                    "",
                )
                continue
            table.add_row(
                r.store, r.name, r.regular_price, r.promo_price, r.url
            )

    Console().print(table)


def _cheapest(response: SearchResponse) -> ProductRecord | None:
    products = [
        r
        for records in response.results.values()
        for r in records
        if not r.is_error and effective_price(r) > 0
    ]
    return min(products, key=effective_price, default=None)


async def cli_search(
    query: str,
    store: str,
    sequential: bool,
    output_format: str,
    export_path: str | None,
    backend: str | None = None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail)."""
    orchestrator = SearchOrchestrator(build_adapter(backend))
    mode = SearchMode.SEQUENTIAL if sequential else SearchMode.CONCURRENT

    _err.print(
        f"[bold]Buscando:[/bold] {query}  "
        f"[dim]store={store} mode={mode.value}[/dim]"
    )

    try:
        response = await orchestrator.search(query, store, mode)
    except InvalidStoreError as exc:
        valid = ", ".join(s["id"] for s in Settings.AVAILABLE_STORES)
        _err.print(f"[red]{exc}[/red]")
        _err.print(f"[dim]Available: all, {valid}[/dim]")
        return 1
    except InvalidQueryError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    for records in response.results.values():
        for r in records:
            if r.error is not None:
                _err.print(
                    f"[red]{r.store}: Error [Código {r.error.code}]: "
                    f"{r.error.message}[/red]"
                )

    if response.product_count == 0:
        _err.print("[yellow]No se encontraron productos.[/yellow]")
        return 1

    cheapest = _cheapest(response)
    summary = f"[green]✓ {response.product_count} productos"
    if cheapest is not None:
        summary += f", mejor precio en {cheapest.store}"
    _err.print(summary + "[/green]")

    if export_path is not None:
        exporter = SpreadsheetExporter(orchestrator.stores)
        try:
            path = exporter.save_xlsx(
                query,
                exporter.flatten(response.results),
                Path(export_path),
            )
            _err.print(f"[dim]Exportado → {path}[/dim]")
        except (OSError, IllegalCharacterError) as exc:
            logger.error("Export failed: %s", exc, exc_info=True)
            _err.print(f"[red]Export failed: {exc}[/red]")
            return 1

    if output_format == "table":
        _print_table(response)
    else:
        json.dump(
            response.to_dict(),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


def run_server(host: str | None = None, port: int | None = None) -> int:
    """Serve the HTTP API with uvicorn until interrupted."""
    import uvicorn

    from src.api.server import create_app

    bind_host = host or Settings.SERVER_HOST
    bind_port = port or Settings.SERVER_PORT
    _err.print(
        f"[bold]Serving API on http://{bind_host}:{bind_port}[/bold] "
        f"[dim]backend={Settings.GENERATOR_BACKEND}[/dim]"
    )
    uvicorn.run(create_app(), host=bind_host, port=bind_port)
    return 0
