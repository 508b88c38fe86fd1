# tests/test_text_generator.py

"""Tests for the chat-completion client using mocked HTTP responses."""

import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from src.services.text_generator import ChatCompletionClient, GenerationError


def _response(status: int, payload: Any = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def _completion(content: str | None) -> dict[str, Any]:
    return {"choices": [{"message": {"content": content}}]}


class TestChatCompletionClient(unittest.TestCase):
    """ChatCompletionClient.complete behaviour."""

    def setUp(self) -> None:
        patcher = patch(
            "src.services.text_generator.curl_requests.Session"
        )
        self.mock_session_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.session = MagicMock()
        self.mock_session_cls.return_value = self.session
        self.client = ChatCompletionClient(
            base_url="https://llm.example.com/v1/",
            api_key="secret",
            model="test-model",
        )

    def test_returns_content(self) -> None:
        """The first choice's message content is returned."""
        self.session.post.return_value = _response(
            200, _completion("[]")
        )
        self.assertEqual(self.client.complete("sys", "hola"), "[]")

    def test_request_shape(self) -> None:
        """Endpoint, auth header and messages are sent correctly."""
        self.session.post.return_value = _response(
            200, _completion("ok")
        )
        self.client.complete("sys", "hola", temperature=0.2, max_tokens=50)
        args, kwargs = self.session.post.call_args
        self.assertEqual(
            args[0], "https://llm.example.com/v1/chat/completions"
        )
        self.assertEqual(
            kwargs["headers"]["Authorization"], "Bearer secret"
        )
        payload = kwargs["json"]
        self.assertEqual(payload["model"], "test-model")
        self.assertEqual(payload["temperature"], 0.2)
        self.assertEqual(payload["max_tokens"], 50)
        self.assertEqual(
            payload["messages"],
            [
                {"role": "system", "content": "sys"},
                {"role": "user", "content": "hola"},
            ],
        )

    def test_no_auth_header_without_key(self) -> None:
        """An empty API key sends no Authorization header."""
        client = ChatCompletionClient(api_key="")
        self.session.post.return_value = _response(
            200, _completion("ok")
        )
        client.complete("sys", "hola")
        headers = self.session.post.call_args.kwargs["headers"]
        self.assertNotIn("Authorization", headers)

    def test_retries_then_succeeds(self) -> None:
        """A 500 followed by a 200 succeeds on the second attempt."""
        self.session.post.side_effect = [
            _response(500),
            _response(200, _completion("ok")),
        ]
        self.assertEqual(self.client.complete("sys", "hola"), "ok")
        self.assertEqual(self.session.post.call_count, 2)

    def test_transport_errors_exhaust_retries(self) -> None:
        """Persistent transport errors raise GenerationError."""
        self.session.post.side_effect = ConnectionError("reset")
        with self.assertRaises(GenerationError):
            self.client.complete("sys", "hola")
        self.assertEqual(
            self.session.post.call_count, self.client.settings.MAX_RETRIES
        )

    def test_empty_content_raises(self) -> None:
        """An empty completion is an error."""
        self.session.post.return_value = _response(200, _completion(""))
        with self.assertRaises(GenerationError):
            self.client.complete("sys", "hola")

    def test_malformed_payload_raises(self) -> None:
        """Missing choices or invalid JSON raise GenerationError."""
        for payload in ({"choices": []}, ValueError("not json")):
            with self.subTest(payload=payload):
                self.session.post.return_value = _response(200, payload)
                with self.assertRaises(GenerationError):
                    self.client.complete("sys", "hola")


if __name__ == "__main__":
    unittest.main()
