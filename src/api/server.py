# src/api/server.py

"""HTTP surface: store search, batch upload and comparison download."""

import logging

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from src.adapters.factory import build_adapter
from src.config.settings import Settings
from src.services.batch_processor import (
    INTERNAL_ERROR_MESSAGE,
    MISSING_FILE_MESSAGE,
    BatchError,
    BatchProcessor,
)
from src.services.search_orchestrator import (
    ALL_STORES,
    InvalidQueryError,
    InvalidStoreError,
    SearchMode,
    SearchOrchestrator,
)
from src.storage.spreadsheet_exporter import XLSX_MEDIA_TYPE

logger = logging.getLogger("precios_cr.api")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def build_services(
    backend: str | None = None,
) -> tuple[SearchOrchestrator, BatchProcessor]:
    """Wire the orchestrator and batch processor for *backend*."""
    name = (backend or Settings.GENERATOR_BACKEND).lower()
    adapter = build_adapter(name)
    orchestrator = SearchOrchestrator(adapter)
    generator = getattr(adapter, "generator", None)
    return orchestrator, BatchProcessor(orchestrator, generator=generator)


def create_app(
    orchestrator: SearchOrchestrator | None = None,
    batch_processor: BatchProcessor | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Collaborators are injected so tests can pass deterministic fakes;
    when omitted they are built from :class:`Settings`.
    """
    if orchestrator is None:
        orchestrator, default_batch = build_services()
        batch_processor = batch_processor or default_batch
    elif batch_processor is None:
        batch_processor = BatchProcessor(orchestrator)

    app = FastAPI(
        title="precios_cr",
        description="Comparador de precios: Gollo, Monge y MExpress",
    )
    app.state.orchestrator = orchestrator
    app.state.batch_processor = batch_processor

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s: %s", request.url.path, exc, exc_info=exc
        )
        return _error("Internal server error", 500)

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {
            "status": "ok",
            "backend": orchestrator.adapter.backend_name,
            "stores": [s.id for s in orchestrator.stores],
        }

    @app.get("/search")
    async def search(
        q: str | None = None,
        query: str | None = None,
        store: str = ALL_STORES,
        mode: str = SearchMode.CONCURRENT.value,
    ) -> Response:
        term = q or query
        if not term or not term.strip():
            return _error("Missing query parameter `q'", 400)
        try:
            search_mode = SearchMode(mode.lower())
        except ValueError:
            return _error(f"Unknown mode '{mode}'", 400)

        try:
            result = await orchestrator.search(
                term, store or ALL_STORES, search_mode
            )
        except InvalidStoreError as exc:
            return _error(str(exc), 400)
        except InvalidQueryError as exc:
            return _error(str(exc), 400)
        except Exception as exc:
            logger.error("Search API error: %s", exc, exc_info=True)
            return _error("Internal server error", 500)

        logger.info(
            "Search '%s' (store=%s) returned %d products",
            result.query,
            store,
            result.product_count,
        )
        return JSONResponse(result.to_dict())

    @app.post("/process")
    async def process(file: UploadFile | None = File(None)) -> Response:
        if file is None:
            return JSONResponse(
                {"success": False, "error": MISSING_FILE_MESSAGE},
                status_code=400,
            )
        try:
            data = await file.read()
            job = await batch_processor.process(file.filename, data)
        except BatchError as exc:
            return JSONResponse(
                {"success": False, "error": exc.message},
                status_code=exc.status_code,
            )
        except Exception as exc:
            logger.error("Process API error: %s", exc, exc_info=True)
            return JSONResponse(
                {"success": False, "error": INTERNAL_ERROR_MESSAGE},
                status_code=500,
            )

        return JSONResponse(
            {
                "success": True,
                "process_id": job.process_id,
                "download_url": job.download_url,
            }
        )

    @app.get("/download/{process_id}")
    async def download(process_id: str) -> Response:
        try:
            content = await batch_processor.build_download(process_id)
        except Exception as exc:
            logger.error("Download API error: %s", exc, exc_info=True)
            return _error("Error generating download file", 500)

        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": (
                    f'attachment; filename="comparacion_precios_{process_id}.xlsx"'
                ),
            },
        )

    return app
