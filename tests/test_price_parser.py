# tests/test_price_parser.py

"""Tests for colón price formatting and parsing."""

import unittest

from src.filters.price_parser import (
    effective_price,
    format_colones,
    parse_colones,
)
from src.models.product import ProductRecord


class TestFormatColones(unittest.TestCase):
    """format_colones output."""

    def test_thousands_use_dots(self) -> None:
        self.assertEqual(format_colones(1250000), "₡1.250.000")

    def test_small_amount(self) -> None:
        self.assertEqual(format_colones(950), "₡950")

    def test_zero(self) -> None:
        self.assertEqual(format_colones(0), "₡0")


class TestParseColones(unittest.TestCase):
    """parse_colones input handling."""

    def test_dot_separators(self) -> None:
        self.assertEqual(parse_colones("₡1.250.000"), 1250000)

    def test_comma_separators(self) -> None:
        self.assertEqual(parse_colones("₡1,250,000"), 1250000)

    def test_space_separators(self) -> None:
        self.assertEqual(parse_colones("₡1 250 000"), 1250000)

    def test_no_digits(self) -> None:
        self.assertEqual(parse_colones("Sin precio promocional"), 0)

    def test_empty_and_none(self) -> None:
        self.assertEqual(parse_colones(""), 0)
        self.assertEqual(parse_colones(None), 0)

    def test_inverse_of_format(self) -> None:
        for value in (0, 7, 85000, 432199, 1250000):
            with self.subTest(value=value):
                self.assertEqual(
                    parse_colones(format_colones(value)), value
                )


class TestEffectivePrice(unittest.TestCase):
    """Promo price wins when present."""

    def test_promo_preferred(self) -> None:
        record = ProductRecord(
            name="TV", regular_price="₡300.000", promo_price="₡255.000"
        )
        self.assertEqual(effective_price(record), 255000)

    def test_regular_when_no_promo(self) -> None:
        record = ProductRecord(
            name="TV",
            regular_price="₡300.000",
            promo_price="Sin precio promocional",
        )
        self.assertEqual(effective_price(record), 300000)


if __name__ == "__main__":
    unittest.main()
