# src/adapters/base_adapter.py

"""Abstract base class for all store query adapters."""

import logging
from abc import ABC, abstractmethod

from src.models.product import ProductRecord
from src.models.store import FailureKind, Store


class StoreQueryAdapter(ABC):
    """Turns ``(store, term)`` into product records.

    Subclasses implement :meth:`_fetch`, which may raise.  The public
    :meth:`search` never does: every failure becomes a single error
    record carrying the store's fixed code.
    """

    backend_name: str = "base"

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"precios_cr.adapter.{self.backend_name}"
        )

    async def search(self, store: Store, term: str) -> list[ProductRecord]:
        """Return 3-5 records for *term* at *store*, or one error record."""
        self.logger.info(
            "[%s] Iniciando búsqueda para: '%s'", store.id, term
        )
        try:
            records = await self._fetch(store, term)
        except Exception as exc:
            kind = self._classify(exc)
            self.logger.error(
                "[%s] Search for '%s' failed (%s): %s",
                store.id,
                term,
                kind.name,
                exc,
                exc_info=True,
            )
            return [ProductRecord.failed(store, kind)]

        self.logger.info(
            "[%s] Encontrados %d productos", store.id, len(records)
        )
        return records

    def _classify(self, exc: Exception) -> FailureKind:
        """Map an exception raised by :meth:`_fetch` to a failure kind."""
        return FailureKind.UNEXPECTED

    @abstractmethod
    async def _fetch(self, store: Store, term: str) -> list[ProductRecord]:
        """Produce records for *term* at *store*; may raise."""
        ...
