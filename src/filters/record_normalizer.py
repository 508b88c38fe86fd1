# src/filters/record_normalizer.py

"""Turn free-form generator output into validated product records.

The generative service is asked for a JSON array but frequently wraps it
in prose or code fences.  Extraction is deliberately coarse:

1. An empty response fails immediately.
2. The greedy span from the first ``[`` to the last ``]`` is parsed
   strictly.
3. If that fails (or no brackets exist) the whole text is parsed as a
   last resort.

Every failure carries a :class:`FailureKind` so callers can map it to a
store error record.  There is no per-item salvage: one malformed element
rejects the whole response.
"""

import json
import logging
import re
from typing import Any

from src.config.settings import Settings
from src.models.product import ProductRecord
from src.models.store import FailureKind

logger = logging.getLogger("precios_cr.normalizer")

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


class NormalizationError(ValueError):
    """Raised when generator output cannot be turned into records."""

    def __init__(self, kind: FailureKind, detail: str) -> None:
        super().__init__(f"{kind.name}: {detail}")
        self.kind = kind
        self.detail = detail


def extract_json_array(text: str | None) -> list[Any]:
    """Locate and parse the JSON array embedded in *text*."""
    if text is None or not text.strip():
        raise NormalizationError(
            FailureKind.EMPTY_RESPONSE, "generator returned no text"
        )

    match = _ARRAY_PATTERN.search(text)
    if match is not None:
        try:
            parsed: Any = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.debug(
                "Bracket span is not valid JSON, trying whole text"
            )
        else:
            if isinstance(parsed, list):
                return parsed

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        kind = (
            FailureKind.INVALID_JSON
            if match is not None
            else FailureKind.NO_ARRAY_FOUND
        )
        raise NormalizationError(kind, str(exc)) from exc

    if not isinstance(parsed, list):
        raise NormalizationError(
            FailureKind.SCHEMA_MISMATCH,
            f"expected a JSON array, got {type(parsed).__name__}",
        )
    return parsed


def _text_field(item: dict[str, Any], key: str, default: str) -> str:
    value = item.get(key)
    if value is None or value == "":
        return default
    return str(value)


def normalize_records(
    text: str | None, store_label: str,
) -> list[ProductRecord]:
    """Parse *text* into product records for the store *store_label*.

    Missing fields are filled with fixed defaults; ``store`` is always
    set to *store_label* regardless of what the generator wrote.
    """
    items = extract_json_array(text)
    if not items:
        raise NormalizationError(
            FailureKind.SCHEMA_MISMATCH, "array contains no products"
        )

    records: list[ProductRecord] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise NormalizationError(
                FailureKind.SCHEMA_MISMATCH,
                f"element {index} is {type(item).__name__}, not an object",
            )
        records.append(
            ProductRecord(
                name=_text_field(
                    item, "name", Settings.UNKNOWN_PRODUCT_NAME
                ),
                regular_price=_text_field(
                    item,
                    "regular_price",
                    f"{Settings.CURRENCY_SYMBOL}0",
                ),
                promo_price=_text_field(
                    item, "promo_price", Settings.NO_PROMO_TEXT
                ),
                url=_text_field(item, "url", ""),
                image_url=_text_field(
                    item, "image_url", Settings.PLACEHOLDER_IMAGE_URL
                ),
                store=store_label,
            )
        )

    logger.debug(
        "Normalized %d records for %s", len(records), store_label
    )
    return records
