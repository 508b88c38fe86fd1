# src/ui/app.py

"""Terminal UI for the precios_cr price comparison service."""

import logging
import webbrowser
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Select,
    Static,
)

from src.adapters.factory import build_adapter
from src.config.settings import Settings
from src.filters.price_parser import effective_price
from src.models.product import ProductRecord
from src.services.search_orchestrator import (
    ALL_STORES,
    SearchMode,
    SearchOrchestrator,
)
from src.storage.spreadsheet_exporter import SpreadsheetExporter

logger = logging.getLogger("precios_cr.ui")


class PreciosApp(App[object]):
    """Terminal UI for the precios_cr price comparison service."""

    CSS_PATH = "styles.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("e", "export", "Export Excel"),
        Binding("p", "sort_price", "Price Sort"),
    ]

    def __init__(self, backend: str | None = None) -> None:
        super().__init__()
        self.settings = Settings()
        self.orchestrator = SearchOrchestrator(build_adapter(backend))
        self.exporter = SpreadsheetExporter(self.orchestrator.stores)
        self.records: list[ProductRecord] = []
        self.results: dict[str, list[ProductRecord]] = {}
        self.current_query: str = ""

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        store_options = [("Todas las tiendas", ALL_STORES)] + [
            (s.label, s.id) for s in self.orchestrator.stores
        ]
        store_names = ", ".join(s.label for s in self.orchestrator.stores)

        yield Header()
        yield Container(
            Static(
                f"🛒 Comparador de Precios ({store_names})", id="title"
            ),
            Horizontal(
                Input(
                    placeholder="Buscar productos...", id="search_input"
                ),
                Button("Buscar", variant="primary", id="search_btn"),
                id="search_bar",
            ),
            Horizontal(
                Select(
                    store_options,
                    value=ALL_STORES,
                    allow_blank=False,
                    id="store_select",
                ),
                Checkbox("Secuencial", value=False, id="sequential_check"),
                id="search_options",
            ),
            Static("Listo", id="status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="results_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Configure the results table columns on startup."""
        table = cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )
        table.add_columns(
            "Tienda", "Producto", "Precio Regular", "Precio Promoción", "URL"
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "search_btn":
            await self.perform_search()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle Enter key in the search input."""
        if event.input.id == "search_input":
            await self.perform_search()

    async def perform_search(self) -> None:
        """Execute a search against the selected store(s)."""
        query = self.query_one("#search_input", Input).value.strip()
        if not query:
            self.notify(
                "Ingresa un término de búsqueda", severity="warning"
            )
            return

        store = str(self.query_one("#store_select", Select).value)
        sequential = self.query_one("#sequential_check", Checkbox).value
        mode = SearchMode.SEQUENTIAL if sequential else SearchMode.CONCURRENT

        status = self.query_one("#status", Static)
        status.update(f"🔍 Buscando '{query}'...")
        self.current_query = query

        try:
            response = await self.orchestrator.search(query, store, mode)
        except Exception as exc:
            logger.error(
                "Search failed for '%s': %s", query, exc, exc_info=True
            )
            self.notify("Error en la búsqueda", severity="error")
            status.update("❌ Error en la búsqueda")
            return

        self.results = response.results
        self.records = [
            r for records in response.results.values() for r in records
        ]
        for r in self.records:
            if r.error is not None:
                self.notify(
                    f"{r.store}: Error [Código {r.error.code}]",
                    severity="error",
                )
        self.populate_table()

        if response.product_count == 0:
            status.update("❌ No se encontraron productos")
        else:
            status.update(
                f"✅ Encontrados {response.product_count} productos"
            )

    def populate_table(self) -> None:
        """Fill the DataTable with the current records."""
        table = cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )
        table.clear()
        if not self.records:
            return

        min_price = min(
            (
                effective_price(r)
                for r in self.records
                if not r.is_error and effective_price(r) > 0
            ),
            default=0,
        )

        for r in self.records:
            if r.error is not None:
                table.add_row(
                    r.store,
                    Text(
                        f"Error [Código {r.error.code}]: {r.error.message}",
                        style="bold red",
                    ),
                    "",
                    "",
                    "",
                )
                continue
            is_cheapest = effective_price(r) == min_price and min_price > 0
            price_style = "bold green" if is_cheapest else ""
            table.add_row(
                r.store,
                r.name[:60],
                r.regular_price,
                Text(r.promo_price, style=price_style),
                r.url,
            )

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Open the selected product's URL in the default browser."""
        if 0 <= event.cursor_row < len(self.records):
            url = self.records[event.cursor_row].url
            if url:
                webbrowser.open(url)

    def action_sort_price(self) -> None:
        """Sort records by effective price, errors last."""
        self.records.sort(
            key=lambda r: (
                effective_price(r)
                if not r.is_error and effective_price(r) > 0
                else float("inf")
            )
        )
        self.populate_table()

    def action_export(self) -> None:
        """Export current results to an .xlsx file."""
        rows = self.exporter.flatten(self.results)
        if not rows:
            self.notify("No hay resultados para exportar", severity="warning")
            return
        try:
            path = self.exporter.save_xlsx(self.current_query, rows)
            logger.info("Exported results to %s", path)
            self.notify(f"Exportado a {path}")
        except Exception as e:
            logger.error("Failed to export results", exc_info=True)
            self.notify(f"Export failed: {e}", severity="error")
