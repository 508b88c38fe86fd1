# tests/test_generative_adapter.py

"""Tests for the generator-backed adapter and the adapter factory."""

import json
import unittest
from typing import Any

from src.adapters.factory import build_adapter
from src.adapters.generative_adapter import (
    GenerativeStoreAdapter,
    build_search_prompt,
)
from src.adapters.mock_adapter import MockStoreAdapter
from src.models.store import FailureKind, load_stores
from src.services.text_generator import GenerationError

STORES = {s.id: s for s in load_stores()}


class FakeGenerator:
    """Deterministic stand-in for the chat-completion client."""

    def __init__(
        self, reply: str = "", error: Exception | None = None,
    ) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def complete(
        self, system: str, prompt: str, **kwargs: Any,
    ) -> str:
        self.calls.append((system, prompt))
        if self.error is not None:
            raise self.error
        return self.reply


_REPLY = (
    "Aquí tienes:\n"
    + json.dumps(
        [
            {
                "name": "Refrigeradora LG 14p",
                "regular_price": "₡549.900",
                "promo_price": "₡499.900",
                "url": "https://www.gollo.cr/refri-lg",
                "image_url": "https://example.com/lg.png",
            },
            {"name": "Refrigeradora Mabe 11p"},
            {"name": "Refrigeradora Samsung 16p"},
        ]
    )
)


class TestGenerativeStoreAdapter(unittest.IsolatedAsyncioTestCase):
    """GenerativeStoreAdapter.search behaviour."""

    async def test_parses_generator_reply(self) -> None:
        """A well-formed reply becomes product records."""
        adapter = GenerativeStoreAdapter(FakeGenerator(_REPLY))
        records = await adapter.search(STORES["gollo"], "refrigeradora")
        self.assertEqual(len(records), 3)
        self.assertTrue(all(r.store == "Gollo" for r in records))
        self.assertEqual(records[1].regular_price, "₡0")

    async def test_prompt_embeds_store_and_term(self) -> None:
        """The prompt names the store, its domain and the term."""
        generator = FakeGenerator(_REPLY)
        adapter = GenerativeStoreAdapter(generator)
        await adapter.search(STORES["monge"], "lavadora")
        _, prompt = generator.calls[0]
        self.assertIn("Monge", prompt)
        self.assertIn("monge.cr", prompt)
        self.assertIn('"lavadora"', prompt)

    async def test_generator_error_is_upstream(self) -> None:
        """A raising generator yields one UPSTREAM error record."""
        adapter = GenerativeStoreAdapter(
            FakeGenerator(error=GenerationError("timeout"))
        )
        records = await adapter.search(STORES["monge"], "tv")
        self.assertEqual(len(records), 1)
        err = records[0].error
        assert err is not None
        self.assertEqual(err.code, 101)
        self.assertIs(err.kind, FailureKind.UPSTREAM)
        self.assertEqual(err.message, "Error al acceder al sitio de Monge")

    async def test_transport_error_is_upstream(self) -> None:
        """Non-GenerationError exceptions are also upstream faults."""
        adapter = GenerativeStoreAdapter(
            FakeGenerator(error=ConnectionError("reset"))
        )
        records = await adapter.search(STORES["gollo"], "tv")
        err = records[0].error
        assert err is not None
        self.assertIs(err.kind, FailureKind.UPSTREAM)

    async def test_unparseable_reply_is_typed(self) -> None:
        """Normalization failures keep their specific kind."""
        cases = {
            "": FailureKind.EMPTY_RESPONSE,
            "No tengo datos.": FailureKind.NO_ARRAY_FOUND,
            "[{'name': 'x'}]": FailureKind.INVALID_JSON,
            '{"name": "x"}': FailureKind.SCHEMA_MISMATCH,
        }
        for reply, kind in cases.items():
            with self.subTest(reply=reply):
                adapter = GenerativeStoreAdapter(FakeGenerator(reply))
                records = await adapter.search(STORES["mexpress"], "tv")
                self.assertEqual(len(records), 1)
                err = records[0].error
                assert err is not None
                self.assertEqual(err.code, 102)
                self.assertIs(err.kind, kind)
                self.assertEqual(records[0].name, "")

    def test_build_search_prompt_requests_array(self) -> None:
        """The prompt asks for a 3-5 element JSON array."""
        prompt = build_search_prompt(STORES["gollo"], "iphone")
        self.assertIn("entre 3 y 5", prompt)
        self.assertIn('"regular_price"', prompt)


class TestBuildAdapter(unittest.TestCase):
    """Adapter factory selection."""

    def test_mock_backend(self) -> None:
        self.assertIsInstance(build_adapter("mock"), MockStoreAdapter)

    def test_ai_backend_uses_given_generator(self) -> None:
        generator = FakeGenerator(_REPLY)
        adapter = build_adapter("AI", generator=generator)
        self.assertIsInstance(adapter, GenerativeStoreAdapter)
        assert isinstance(adapter, GenerativeStoreAdapter)
        self.assertIs(adapter.generator, generator)

    def test_unknown_backend_raises(self) -> None:
        with self.assertRaises(ValueError):
            build_adapter("scraper")


if __name__ == "__main__":
    unittest.main()
