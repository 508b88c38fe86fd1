# src/filters/price_parser.py

"""Colón price text helpers (``₡1.250.000`` ⇄ ``1250000``)."""

import re

from src.config.settings import Settings
from src.models.product import ProductRecord


def format_colones(value: int) -> str:
    """Format an integer amount as ``₡1.250.000``."""
    grouped = f"{value:,}".replace(",", ".")
    return f"{Settings.CURRENCY_SYMBOL}{grouped}"


def parse_colones(text: str | None) -> int:
    """Extract an integer amount from text like '₡1.250.000'.

    Dots, commas and spaces between digits are treated as thousands
    separators.  Returns 0 when no digits are present.
    """
    if not text:
        return 0
    match = re.search(r"\d[\d.,\s  ]*", text)
    if not match:
        return 0
    digits = re.sub(r"\D", "", match.group(0))
    return int(digits) if digits else 0


def effective_price(record: ProductRecord) -> int:
    """Return the promo price when present, else the regular price."""
    promo = parse_colones(record.promo_price)
    if promo > 0:
        return promo
    return parse_colones(record.regular_price)
