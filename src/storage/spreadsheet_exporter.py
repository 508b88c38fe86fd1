# src/storage/spreadsheet_exporter.py

"""Serialises search results to single-sheet ``.xlsx`` workbooks."""

import io
import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.worksheet.worksheet import Worksheet

from src.config.settings import Settings
from src.models.product import ProductRecord
from src.models.store import Store, load_stores

logger = logging.getLogger("precios_cr.storage")

XLSX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)

SEARCH_COLUMNS: list[str] = [
    "Tienda",
    "Nombre del Producto",
    "Precio Regular",
    "Precio Promoción",
    "URL",
]


class SpreadsheetExporter:
    """Builds, saves and reads back result workbooks."""

    def __init__(self, stores: list[Store] | None = None) -> None:
        self.results_dir: Path = Settings.RESULTS_DIR
        self._labels = {
            s.id: s.label for s in (stores or load_stores())
        }

    def flatten(
        self, results: Mapping[str, list[ProductRecord]],
    ) -> list[dict[str, str]]:
        """One row per product record; error placeholders are skipped."""
        rows: list[dict[str, str]] = []
        for store_id, records in results.items():
            for record in records:
                if record.is_error:
                    continue
                rows.append(
                    {
                        "Tienda": record.store
                        or self._labels.get(store_id, store_id),
                        "Nombre del Producto": record.name,
                        "Precio Regular": record.regular_price,
                        "Precio Promoción": record.promo_price,
                        "URL": record.url,
                    }
                )
        return rows

    @staticmethod
    def _append_text_row(ws: Worksheet, values: list[Any]) -> None:
        """Append *values*, keeping strings as literal text cells."""
        ws.append(
            [
                ILLEGAL_CHARACTERS_RE.sub("", v) if isinstance(v, str) else v
                for v in values
            ]
        )
        for cell in ws[ws.max_row]:
            if cell.data_type == "f":
                cell.data_type = "s"

    def to_xlsx_bytes(
        self,
        rows: list[dict[str, Any]],
        sheet_title: str = "Resultados de Búsqueda",
        columns: list[str] | None = None,
    ) -> bytes:
        """Write *rows* to an in-memory workbook and return its bytes.

        The header comes from *columns*, else from the first row's keys.
        Every cell is written as plain text: control characters are
        stripped and text starting with ``=`` is never stored as a formula.
        """
        header = columns or (list(rows[0].keys()) if rows else [])

        wb = Workbook()
        ws = wb.active
        # Sheet titles are capped at 31 characters by Excel.
        ws.title = sheet_title[:31]
        if header:
            self._append_text_row(ws, header)
        for row in rows:
            self._append_text_row(ws, [row.get(col, "") for col in header])

        buf = io.BytesIO()
        wb.save(buf)
        logger.debug(
            "Built workbook '%s' with %d rows", ws.title, len(rows)
        )
        return buf.getvalue()

    def save_xlsx(
        self,
        query: str,
        rows: list[dict[str, Any]],
        path: Path | None = None,
    ) -> Path:
        """Save rows to *path*, or a timestamped file in ``results/``."""
        if path is None:
            self.results_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"resultados_{query.replace(' ', '_')}_{timestamp}.xlsx"
            path = self.results_dir / filename
        else:
            path.parent.mkdir(parents=True, exist_ok=True)

        path.write_bytes(
            self.to_xlsx_bytes(rows, columns=SEARCH_COLUMNS)
        )
        logger.info(
            "Exported %d rows for query '%s' to %s",
            len(rows),
            query,
            path,
        )
        return path

    @staticmethod
    def read_xlsx_rows(data: bytes) -> list[dict[str, str]]:
        """Read the first sheet back into label-keyed rows."""
        wb = load_workbook(io.BytesIO(data))
        ws = wb.worksheets[0]
        values = list(ws.iter_rows(values_only=True))
        wb.close()
        if not values:
            return []
        header = [str(h) for h in values[0]]
        return [
            {
                col: "" if cell is None else str(cell)
                for col, cell in zip(header, row)
            }
            for row in values[1:]
        ]
