# src/adapters/mock_adapter.py

"""Pseudo-random record generator used when no real backend is wired."""

import asyncio
import random
from urllib.parse import quote

from src.adapters.base_adapter import StoreQueryAdapter
from src.config.settings import Settings
from src.filters.price_parser import format_colones
from src.models.product import ProductRecord
from src.models.store import Store


def _slugify(term: str) -> str:
    """Lowercase, collapse whitespace to dashes, URL-quote."""
    return quote("-".join(term.lower().split()), safe="")


class MockStoreAdapter(StoreQueryAdapter):
    """Generates plausible records with a simulated network delay.

    Both the random source and the delay range are injected so tests
    can run deterministically and without sleeping.
    """

    backend_name = "mock"

    def __init__(
        self,
        rng: random.Random | None = None,
        delay_range: tuple[float, float] | None = None,
    ) -> None:
        super().__init__()
        self.rng = rng or random.Random()
        self.delay_range = (
            delay_range
            if delay_range is not None
            else Settings.MOCK_DELAY_RANGE
        )

    async def _fetch(self, store: Store, term: str) -> list[ProductRecord]:
        low, high = self.delay_range
        if high > 0:
            await asyncio.sleep(self.rng.uniform(low, high))
        return self.generate(store, term)

    def generate(self, store: Store, term: str) -> list[ProductRecord]:
        """Draw 3-5 records for *term*, scaled by the store multiplier."""
        count = self.rng.randint(3, 5)
        slug = _slugify(term)
        image_url = Settings.PLACEHOLDER_IMAGE_URL + quote(
            term[:15], safe=""
        )

        records: list[ProductRecord] = []
        for i in range(count):
            base_price = int(
                (self.rng.random() * 500000 + 100000)
                * store.price_multiplier
            )
            has_promo = self.rng.random() < Settings.MOCK_PROMO_PROBABILITY
            promo_text = (
                format_colones(int(base_price * Settings.MOCK_PROMO_FACTOR))
                if has_promo
                else Settings.NO_PROMO_TEXT
            )
            records.append(
                ProductRecord(
                    name=f"{term} - Modelo {chr(65 + i)} {store.label}",
                    regular_price=format_colones(base_price),
                    promo_price=promo_text,
                    url=f"https://www.{store.domain}/productos/{slug}-{i + 1}",
                    image_url=image_url,
                    store=store.label,
                )
            )
        return records
