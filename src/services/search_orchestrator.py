# src/services/search_orchestrator.py

"""Fans a product search out across stores and joins the results."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from src.adapters.base_adapter import StoreQueryAdapter
from src.models.product import ProductRecord
from src.models.store import FailureKind, Store, load_stores

logger = logging.getLogger("precios_cr.orchestrator")

ALL_STORES = "all"


class InvalidStoreError(ValueError):
    """Raised when a store selection is not in the registry."""

    def __init__(self, store_id: str) -> None:
        super().__init__(f"Unknown store '{store_id}'")
        self.store_id = store_id


class InvalidQueryError(ValueError):
    """Raised when the search term is missing or blank."""


class SearchMode(Enum):
    """How per-store lookups are scheduled."""

    CONCURRENT = "concurrent"
    SEQUENTIAL = "sequential"


@dataclass(frozen=True)
class StoreOutcome:
    """Tagged result of one fan-out branch."""

    store_id: str
    records: list[ProductRecord]
    failure: FailureKind | None = None


@dataclass(frozen=True)
class SearchResponse:
    """Container for a completed search; built once per request."""

    query: str
    results: dict[str, list[ProductRecord]] = field(
        default_factory=lambda: dict[str, list[ProductRecord]]()
    )
    store: str | None = None
    error: str | None = None

    @property
    def product_count(self) -> int:
        """Number of non-error records across all stores."""
        return sum(
            1
            for records in self.results.values()
            for r in records
            if not r.is_error
        )

    def to_dict(self) -> dict[str, object]:
        """Serialise to the HTTP payload shape.

        All-store searches map store id to records; a single-store search
        carries ``store`` and a flat ``results`` list.
        """
        if self.store is not None:
            return {
                "query": self.query,
                "store": self.store,
                "results": [
                    r.to_dict() for r in self.results.get(self.store, [])
                ],
            }
        payload: dict[str, object] = {
            "query": self.query,
            "results": {
                store_id: [r.to_dict() for r in records]
                for store_id, records in self.results.items()
            },
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


class SearchOrchestrator:
    """Dispatches the store adapter across the selected stores."""

    def __init__(
        self,
        adapter: StoreQueryAdapter,
        stores: list[Store] | None = None,
    ) -> None:
        self.adapter = adapter
        self.stores = stores if stores is not None else load_stores()
        self._by_id = {s.id: s for s in self.stores}

    def resolve_stores(self, selection: str) -> list[Store]:
        """Map ``"all"`` (or a blank selection) or a store id to entries.

        Raises :class:`InvalidStoreError` on unknown ids.
        """
        key = (selection or "").strip().lower() or ALL_STORES
        if key == ALL_STORES:
            return list(self.stores)
        store = self._by_id.get(key)
        if store is None:
            raise InvalidStoreError(selection)
        return [store]

    # ── Branches ─────────────────────────────────────────

    async def _run_branch(self, store: Store, term: str) -> StoreOutcome:
        """Run one store lookup; faults become the store's error record."""
        try:
            records = await self.adapter.search(store, term)
        except Exception as exc:
            logger.error(
                "Adapter raised for store '%s', query '%s': %s",
                store.id,
                term,
                exc,
                exc_info=exc,
            )
            return StoreOutcome(
                store_id=store.id,
                records=[ProductRecord.failed(store, FailureKind.UNEXPECTED)],
                failure=FailureKind.UNEXPECTED,
            )

        failure = next(
            (r.error.kind for r in records if r.error is not None), None
        )
        return StoreOutcome(
            store_id=store.id, records=records, failure=failure
        )

    async def _run_concurrent(
        self, stores: list[Store], term: str,
    ) -> list[StoreOutcome]:
        """Start every branch at once; collect in completion order."""
        tasks = [
            asyncio.ensure_future(self._run_branch(store, term))
            for store in stores
        ]
        outcomes: list[StoreOutcome] = []
        for next_done in asyncio.as_completed(tasks):
            outcomes.append(await next_done)
        return outcomes

    async def _run_sequential(
        self, stores: list[Store], term: str,
    ) -> list[StoreOutcome]:
        """Await each branch before starting the next, in store order."""
        outcomes: list[StoreOutcome] = []
        for store in stores:
            outcomes.append(await self._run_branch(store, term))
        return outcomes

    # ── Entry point ──────────────────────────────────────

    async def search(
        self,
        term: str,
        store: str = ALL_STORES,
        mode: SearchMode = SearchMode.CONCURRENT,
    ) -> SearchResponse:
        """Search *term* at the selected store(s).

        Raises :class:`InvalidQueryError` for a blank term and
        :class:`InvalidStoreError` for an unknown store.  Store-level
        failures never raise; they appear as error records.
        """
        query = (term or "").strip()
        if not query:
            raise InvalidQueryError("Missing query parameter `q'")

        selected = self.resolve_stores(store)
        logger.info(
            "Searching '%s' in %s (%s)",
            query,
            ", ".join(s.id for s in selected),
            mode.value,
        )

        if mode is SearchMode.SEQUENTIAL:
            outcomes = await self._run_sequential(selected, query)
        else:
            outcomes = await self._run_concurrent(selected, query)

        results: dict[str, list[ProductRecord]] = {}
        for outcome in outcomes:
            results[outcome.store_id] = outcome.records
            if outcome.failure is not None:
                logger.warning(
                    "Store '%s' failed for '%s': %s",
                    outcome.store_id,
                    query,
                    outcome.failure.name,
                )

        all_selected = (store or "").strip().lower() in ("", ALL_STORES)
        single = None if all_selected else selected[0].id
        return SearchResponse(query=query, results=results, store=single)
