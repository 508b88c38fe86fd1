# src/services/text_generator.py

"""Client for an OpenAI-compatible chat-completion endpoint."""

import logging
import time
from typing import Any, Protocol

from curl_cffi import requests as curl_requests

from src.config.settings import Settings

logger = logging.getLogger("precios_cr.generator")


class GenerationError(RuntimeError):
    """Raised when the generative service yields no usable text."""


class TextGenerator(Protocol):
    """Anything that turns a prompt into free-form text."""

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = ...,
        max_tokens: int = ...,
    ) -> str:
        ...


class ChatCompletionClient:
    """Blocking chat-completion client with retries.

    Callers on the event loop should run :meth:`complete` through
    ``asyncio.to_thread``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.base_url = (base_url or self.settings.LLM_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else self.settings.LLM_API_KEY
        self.model = model or self.settings.LLM_MODEL
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, payload: dict[str, Any]) -> curl_requests.Response | None:
        """POST with retries and linear backoff; None when exhausted."""
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.post(
                    self.endpoint,
                    headers=self._headers(),
                    json=payload,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
                if resp.status_code == 200:
                    return resp
                logger.warning(
                    "Generator HTTP %d on attempt %d",
                    resp.status_code,
                    attempt + 1,
                )
            except Exception as exc:
                logger.warning(
                    "Generator request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            time.sleep(self.settings.RETRY_DELAY * (attempt + 1))
        return None

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = Settings.LLM_TEMPERATURE,
        max_tokens: int = Settings.LLM_MAX_TOKENS,
    ) -> str:
        """Send one system + user exchange and return the reply text."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        resp = self._post(payload)
        if resp is None:
            msg = (
                f"No response from {self.endpoint} after "
                f"{self.settings.MAX_RETRIES} attempts"
            )
            raise GenerationError(msg)

        try:
            data: dict[str, Any] = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise GenerationError("Malformed completion payload") from exc

        if not content:
            raise GenerationError("No response from AI")

        logger.debug("Generator returned %d characters", len(content))
        return str(content)
