# src/adapters/generative_adapter.py

"""Store adapter backed by the generative text service."""

import asyncio

from src.adapters.base_adapter import StoreQueryAdapter
from src.config.settings import Settings
from src.filters.record_normalizer import NormalizationError, normalize_records
from src.models.product import ProductRecord
from src.models.store import FailureKind, Store
from src.services.text_generator import TextGenerator

SYSTEM_PROMPT = (
    "Eres un asistente que genera datos realistas de productos de "
    "tiendas de Costa Rica. Responde siempre con un arreglo JSON válido."
)


def build_search_prompt(store: Store, term: str) -> str:
    """Build the per-store product search prompt."""
    return (
        f'Simula una búsqueda de "{term}" en la tienda {store.label} '
        f"({store.domain}) de Costa Rica.\n"
        "Devuelve entre 3 y 5 productos como un arreglo JSON con esta "
        "estructura exacta:\n"
        "[\n"
        "  {\n"
        f'    "name": "{term} ...",\n'
        '    "regular_price": "₡250.000",\n'
        f'    "promo_price": "₡212.500 o {Settings.NO_PROMO_TEXT}",\n'
        f'    "url": "https://www.{store.domain}/...",\n'
        '    "image_url": "https://..."\n'
        "  }\n"
        "]\n"
        "Los precios van en colones con punto como separador de miles."
    )


class GenerativeStoreAdapter(StoreQueryAdapter):
    """Asks the text generator for records and normalizes its reply."""

    backend_name = "ai"

    def __init__(self, generator: TextGenerator) -> None:
        super().__init__()
        self.generator = generator

    async def _fetch(self, store: Store, term: str) -> list[ProductRecord]:
        content = await asyncio.to_thread(
            self.generator.complete,
            SYSTEM_PROMPT,
            build_search_prompt(store, term),
            temperature=Settings.LLM_TEMPERATURE,
            max_tokens=Settings.LLM_MAX_TOKENS,
        )
        return normalize_records(content, store.label)

    def _classify(self, exc: Exception) -> FailureKind:
        if isinstance(exc, NormalizationError):
            return exc.kind
        # GenerationError and raw transport errors alike
        return FailureKind.UPSTREAM
