# src/services/batch_processor.py

"""Batch upload intake and comparison-workbook generation.

An uploaded spreadsheet is validated by extension and written to the
transient upload directory; its contents are never read back.  The
download for a job is regenerated on every request and is unrelated to
the uploaded file: with the ``ai`` backend the rows come from the text
generator, with the ``mock`` backend they come from running the store
search over a fixed list of sample products.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.filters.price_parser import effective_price, format_colones
from src.filters.record_normalizer import NormalizationError, extract_json_array
from src.models.store import FailureKind
from src.services.search_orchestrator import SearchOrchestrator
from src.services.text_generator import TextGenerator
from src.storage.spreadsheet_exporter import SpreadsheetExporter

logger = logging.getLogger("precios_cr.batch")

COMPARISON_SHEET_TITLE = "Comparación de Precios"

MISSING_FILE_MESSAGE = "No se encontró el archivo"
INVALID_FORMAT_MESSAGE = (
    "Formato no válido. Use Excel (.xlsx, .xls) o CSV (.csv, .tsv)"
)
INTERNAL_ERROR_MESSAGE = "Error interno del servidor"

_BATCH_SYSTEM_PROMPT = (
    "You are a helpful assistant that simulates batch file processing "
    "for product comparison."
)
_DOWNLOAD_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates realistic product "
    "comparison data for Costa Rican stores. Always return valid JSON arrays."
)


class BatchError(Exception):
    """A batch failure with the HTTP status it should surface as."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class BatchJob:
    """Handle returned for an accepted upload."""

    process_id: str
    download_url: str
    upload_path: Path


def validate_filename(filename: str | None) -> str:
    """Return the lowercase extension of *filename* or raise BatchError."""
    if not filename:
        raise BatchError(MISSING_FILE_MESSAGE, 400)
    name = filename.lower()
    dot = name.rfind(".")
    extension = name[dot:] if dot >= 0 else ""
    if extension not in Settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise BatchError(INVALID_FORMAT_MESSAGE, 400)
    return extension


class BatchProcessor:
    """Accepts uploads and builds comparison workbooks."""

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        generator: TextGenerator | None = None,
        upload_dir: Path | None = None,
        exporter: SpreadsheetExporter | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.generator = generator
        self.upload_dir = upload_dir or Settings.UPLOADS_DIR
        self.exporter = exporter or SpreadsheetExporter(orchestrator.stores)

    # ── Upload ───────────────────────────────────────────

    async def process(self, filename: str | None, data: bytes) -> BatchJob:
        """Store the upload and return a job handle.

        Raises :class:`BatchError` for bad input (400) or when the
        generator summary step fails (500).
        """
        validate_filename(filename)
        name = Path(str(filename)).name

        process_id = str(uuid.uuid4())
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        upload_path = self.upload_dir / f"{process_id}_{name}"
        await asyncio.to_thread(upload_path.write_bytes, data)
        logger.info(
            "Stored upload '%s' (%d bytes) as %s",
            filename,
            len(data),
            upload_path,
        )

        if self.generator is not None:
            try:
                summary = await asyncio.to_thread(
                    self.generator.complete,
                    _BATCH_SYSTEM_PROMPT,
                    self._summary_prompt(name),
                    temperature=Settings.LLM_TEMPERATURE,
                    max_tokens=500,
                )
            except Exception as exc:
                logger.error(
                    "Batch processing error for '%s': %s",
                    filename,
                    exc,
                    exc_info=True,
                )
                raise BatchError(INTERNAL_ERROR_MESSAGE, 500) from exc
            logger.info("Batch summary for %s: %s", process_id, summary)

        return BatchJob(
            process_id=process_id,
            download_url=f"/download/{process_id}",
            upload_path=upload_path,
        )

    @staticmethod
    def _summary_prompt(filename: str) -> str:
        return (
            f'Simulate processing a batch file named "{filename}" for '
            "product comparison. Generate a realistic summary as JSON with "
            'the keys "productsProcessed", "processingTime", "errors" and '
            '"summary".'
        )

    # ── Download ─────────────────────────────────────────

    def comparison_columns(self) -> list[str]:
        columns = ["Producto"]
        for store in self.orchestrator.stores:
            columns += [f"{store.label} Regular", f"{store.label} Promo"]
        columns += ["Mejor Precio", "Tienda Mejor Precio", "URL"]
        return columns

    async def build_download(self, process_id: str) -> bytes:
        """Regenerate the comparison workbook for *process_id*."""
        if self.generator is not None:
            rows = await self._generated_rows(self.generator)
        else:
            rows = await self._sampled_rows()
        logger.info(
            "Built download for %s with %d rows", process_id, len(rows)
        )
        return await asyncio.to_thread(
            self.exporter.to_xlsx_bytes,
            rows,
            COMPARISON_SHEET_TITLE,
            self._download_columns(rows),
        )

    def _download_columns(self, rows: list[dict[str, Any]]) -> list[str]:
        """Fixed comparison columns, then extra row keys in first-seen order."""
        columns = self.comparison_columns()
        for row in rows:
            columns += [key for key in row if key not in columns]
        return columns

    async def _generated_rows(
        self, generator: TextGenerator,
    ) -> list[dict[str, Any]]:
        """Ask the generator for 10-15 comparison rows."""
        labels = ", ".join(s.label for s in self.orchestrator.stores)
        example = {col: "..." for col in self.comparison_columns()}
        prompt = (
            "Generate realistic product comparison data for a batch "
            f"processing job. Create 10-15 products with comparisons "
            f"across {labels} stores in Costa Rica. Return a JSON array "
            f"of objects with exactly these keys: {example}"
        )
        content = await asyncio.to_thread(
            generator.complete,
            _DOWNLOAD_SYSTEM_PROMPT,
            prompt,
            temperature=Settings.LLM_TEMPERATURE,
            max_tokens=Settings.LLM_MAX_TOKENS,
        )
        items = extract_json_array(content)
        rows = [item for item in items if isinstance(item, dict)]
        if len(rows) != len(items):
            raise NormalizationError(
                FailureKind.SCHEMA_MISMATCH, "comparison rows must be objects"
            )
        return rows

    async def _sampled_rows(self) -> list[dict[str, Any]]:
        """Run the store search over the sample terms, one row each."""
        terms = Settings.SAMPLE_BATCH_TERMS
        responses = await asyncio.gather(
            *(self.orchestrator.search(term) for term in terms)
        )
        rows: list[dict[str, Any]] = []
        for term, response in zip(terms, responses):
            row: dict[str, Any] = {"Producto": term}
            best: tuple[int, str, str] | None = None
            for store in self.orchestrator.stores:
                records = [
                    r
                    for r in response.results.get(store.id, [])
                    if not r.is_error
                ]
                if not records:
                    row[f"{store.label} Regular"] = ""
                    row[f"{store.label} Promo"] = ""
                    continue
                cheapest = min(records, key=effective_price)
                row[f"{store.label} Regular"] = cheapest.regular_price
                row[f"{store.label} Promo"] = cheapest.promo_price
                price = effective_price(cheapest)
                if price > 0 and (best is None or price < best[0]):
                    best = (price, store.label, cheapest.url)
            if best is not None:
                row["Mejor Precio"] = format_colones(best[0])
                row["Tienda Mejor Precio"] = best[1]
                row["URL"] = best[2]
            rows.append(row)
        return rows
