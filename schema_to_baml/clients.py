"""
OpenAI-compatible chat completion adapter.

A ready-made `generate_text` collaborator for the orchestrator. It performs a
single request; retries belong to the orchestrator.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from .errors import GenerationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIChatGenerator:
    """Calls `<base_url>/chat/completions` with requests."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 60):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> OpenAIChatGenerator:
        """Build from OPENAI_API_KEY and OPENAI_BASE_URL."""
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise GenerationError("OPENAI_API_KEY not set in environment")
        return cls(api_key=api_key, base_url=os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL)

    def __call__(
        self,
        model: str,
        prompt: str | None = None,
        messages: Sequence[Mapping[str, Any]] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
    ) -> dict[str, Any]:
        """
        Run one chat completion.

        Args:
            model: Model ID
            prompt: Sent as a user message after any messages
            messages: Role-tagged chat messages

        Returns:
            Dict with `text`, `usage` and `finishReason`

        Raises:
            GenerationError: On a non-200 response or a malformed body
            requests.RequestException: On transport failures
        """
        chat = [dict(m) for m in messages or []]
        if prompt is not None:
            chat.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {"model": model, "messages": chat}
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature
        if top_p is not None:
            payload["top_p"] = top_p

        response = requests.post(
            f"{self.base_url}/chat/completions",
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        if response.status_code != 200:
            try:
                detail = response.json().get("error", {}).get("message", response.text)
            except (ValueError, AttributeError):
                detail = response.text
            raise GenerationError(f"API error {response.status_code}: {detail}", status_code=response.status_code)

        result = response.json()
        try:
            choice = result["choices"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Malformed completion response: {result!r}") from e

        text = choice.get("message", {}).get("content") or ""
        logger.info("[LLM] model=%s chars_out=%d", model, len(text))
        return {
            "text": text,
            "usage": result.get("usage"),
            "finishReason": choice.get("finish_reason"),
        }
