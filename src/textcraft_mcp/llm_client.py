"""Chat-completions client for the AI format and shorten tools.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint (Groq by
default). The model's behaviour is opaque to us: this module only moves
prompts out and message content back, and turns every failure into an
``LLMAPIError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_TIMEOUT_SECONDS = 30.0


class LLMAPIError(Exception):
    """Raised when the language model API fails or returns no content.

    ``status_code`` is 0 for transport failures and malformed bodies.
    """

    def __init__(self, status_code: int, detail: str, raw: dict | None = None):
        self.status_code = status_code
        self.detail = detail
        self.raw = raw or {}
        super().__init__(f"LLM API {status_code}: {detail}")


class LLMClient:
    """Async chat-completions client with bearer-token auth."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float = 0.3,
        top_p: float | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send a chat completion request and return the reply text.

        Args:
            messages: OpenAI-style ``{"role", "content"}`` messages.
            max_tokens: Completion token budget.
            temperature: Sampling temperature.
            top_p: Optional nucleus sampling cutoff.
            json_mode: Ask the model for a single JSON object.

        Returns:
            The first choice's message content, stripped.

        Raises:
            LLMAPIError: On transport failure, a non-200 status, or a
                response without message content.
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if top_p is not None:
            payload["top_p"] = top_p
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
            except httpx.HTTPError as exc:
                raise LLMAPIError(0, f"Request to language model failed: {exc}")

        if response.status_code == 429:
            raise LLMAPIError(429, "Rate limited by language model API", _safe_json(response))

        if response.status_code != 200:
            body = _safe_json(response)
            logger.error("LLM API error %s: %s", response.status_code, body)
            raise LLMAPIError(
                response.status_code,
                f"Language model API returned {response.status_code}",
                body,
            )

        data = _safe_json(response)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            logger.error("No content in LLM response: %s", data)
            raise LLMAPIError(0, "No content returned from language model API", data)

        return content.strip()


def _safe_json(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except Exception:
        return {"raw": response.text}
    return body if isinstance(body, dict) else {"raw": body}
