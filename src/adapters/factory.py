# src/adapters/factory.py

"""Select the store adapter for the configured generator backend."""

import logging

from src.adapters.base_adapter import StoreQueryAdapter
from src.adapters.generative_adapter import GenerativeStoreAdapter
from src.adapters.mock_adapter import MockStoreAdapter
from src.config.settings import Settings
from src.services.text_generator import ChatCompletionClient, TextGenerator

logger = logging.getLogger("precios_cr.adapter")

BACKENDS = ("mock", "ai")


def build_adapter(
    backend: str | None = None,
    generator: TextGenerator | None = None,
) -> StoreQueryAdapter:
    """Return an adapter for *backend* (defaults to the configured one).

    Raises ``ValueError`` for an unknown backend name.
    """
    name = (backend or Settings.GENERATOR_BACKEND).lower()
    if name == "mock":
        adapter: StoreQueryAdapter = MockStoreAdapter()
    elif name == "ai":
        adapter = GenerativeStoreAdapter(generator or ChatCompletionClient())
    else:
        msg = f"Unknown generator backend '{name}' (expected one of {BACKENDS})"
        raise ValueError(msg)

    logger.info("Using '%s' store adapter", name)
    return adapter
