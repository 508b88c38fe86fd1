# src/models/store.py

"""Store registry entries and the per-store failure lookup table."""

from dataclasses import dataclass
from enum import Enum, auto

from src.config.settings import Settings


class FailureKind(Enum):
    """Why a single store lookup produced an error record."""

    UPSTREAM = auto()
    EMPTY_RESPONSE = auto()
    NO_ARRAY_FOUND = auto()
    INVALID_JSON = auto()
    SCHEMA_MISMATCH = auto()
    UNEXPECTED = auto()


# Message templates by failure kind; ``{label}`` is the store label.
_FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.UPSTREAM: "Error al acceder al sitio de {label}",
    FailureKind.EMPTY_RESPONSE: "Respuesta vacía de {label}",
    FailureKind.NO_ARRAY_FOUND: "Respuesta inválida de {label}",
    FailureKind.INVALID_JSON: "Respuesta inválida de {label}",
    FailureKind.SCHEMA_MISMATCH: "Respuesta inválida de {label}",
    FailureKind.UNEXPECTED: "Error en {label}",
}


@dataclass(frozen=True)
class Store:
    """A retail target that can be queried for products."""

    id: str
    label: str
    domain: str
    error_code: int
    price_multiplier: float = 1.0

    @classmethod
    def from_config(cls, entry: dict[str, str | int | float]) -> "Store":
        """Build a Store from a ``Settings.AVAILABLE_STORES`` entry."""
        return cls(
            id=str(entry["id"]),
            label=str(entry["label"]),
            domain=str(entry["domain"]),
            error_code=int(entry["error_code"]),
            price_multiplier=float(entry.get("price_multiplier", 1.0)),
        )


def load_stores() -> list[Store]:
    """Return the configured stores in registry order."""
    return [Store.from_config(e) for e in Settings.AVAILABLE_STORES]


def build_error_table(
    stores: list[Store],
) -> dict[tuple[str, FailureKind], tuple[int, str]]:
    """Map every ``(store_id, kind)`` pair to its code and message."""
    table: dict[tuple[str, FailureKind], tuple[int, str]] = {}
    for store in stores:
        for kind, template in _FAILURE_MESSAGES.items():
            table[(store.id, kind)] = (
                store.error_code,
                template.format(label=store.label),
            )
    return table


ERROR_TABLE = build_error_table(load_stores())


def resolve_failure(store: Store, kind: FailureKind) -> tuple[int, str]:
    """Look up the error code and localized message for a failure.

    Stores outside the default registry (e.g. injected in tests) fall
    back to their own ``error_code`` with the kind's message template.
    """
    entry = ERROR_TABLE.get((store.id, kind))
    if entry is not None:
        return entry
    return store.error_code, _FAILURE_MESSAGES[kind].format(
        label=store.label
    )
