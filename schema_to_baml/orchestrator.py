"""
Generation orchestrator.

Calls the text generation collaborator with the JSON hint merged into the
request, retries failed calls a bounded number of times, then feeds the raw
text to the generated parser.

Only the generation call is retried. Empty output and parse failures end the
run immediately.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .config import RetryConfig
from .errors import EmptyOutputError
from .hint import merge_hint_into_messages, merge_hint_into_prompt

logger = logging.getLogger(__name__)

# generate_text(model=..., prompt=... | messages=..., max_tokens=..., temperature=..., top_p=...)
TextGenerator = Callable[..., Any]


class Parser(Protocol):
    def parse(self, function_name: str, text: str) -> Any: ...


class GenerationState(str, Enum):
    """Lifecycle of one orchestrated generation."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class GenerateObjectResult:
    """Parsed object plus the raw generation output."""

    object: Any
    text: str
    usage: Any = None
    finish_reason: Any = None


def _field(response: Any, *names: str) -> Any:
    """Read the first present field of a mapping or attribute-style response."""
    for name in names:
        if isinstance(response, Mapping):
            value = response.get(name)
        else:
            value = getattr(response, name, None)
        if value is not None:
            return value
    return None


def extract_text(response: Any) -> str:
    """Text of a generation response (`text`, else `output_text`)."""
    for name in ("text", "output_text"):
        value = _field(response, name)
        if value:
            return value
    return ""


class GenerationOrchestrator:
    """Drives one generate-then-parse run."""

    def __init__(
        self,
        generate_text: TextGenerator,
        parser: Parser,
        function_name: str,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            generate_text: The text generation collaborator
            parser: Loaded generated parser
            function_name: Parse function chosen at translation time
            retry: Retry policy
            sleep: Used to wait between attempts
        """
        self.generate_text = generate_text
        self.parser = parser
        self.function_name = function_name
        self.retry = retry or RetryConfig()
        self.sleep = sleep
        self.state = GenerationState.IDLE
        self.attempts = 0

    def build_request(
        self,
        model: Any,
        hint: str,
        prompt: str | None = None,
        messages: Sequence[Mapping[str, Any]] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
    ) -> dict[str, Any]:
        """Build the keyword arguments of the generation call."""
        request: dict[str, Any] = {"model": model}
        if prompt is not None:
            request["prompt"] = merge_hint_into_prompt(hint, prompt)
        if messages is not None:
            request["messages"] = merge_hint_into_messages(hint, messages)
        request["max_tokens"] = max_tokens
        request["temperature"] = temperature
        request["top_p"] = top_p
        return request

    def run(self, model: Any, hint: str, **kwargs: Any) -> GenerateObjectResult:
        """
        Generate text and parse it.

        Args:
            model: Model handle passed through to the collaborator
            hint: JSON hint merged into the prompt or messages
            **kwargs: prompt, messages, max_tokens, temperature, top_p

        Returns:
            GenerateObjectResult

        Raises:
            EmptyOutputError: If the collaborator returns no text
            Exception: The last generation error, or the parser's error, unchanged
        """
        request = self.build_request(model, hint, **kwargs)
        self.state = GenerationState.ATTEMPTING
        try:
            response = self._generate_with_retry(request)
            text = extract_text(response)
            if not text:
                raise EmptyOutputError("Text generation returned empty text")
            parsed = self.parser.parse(self.function_name, text)
        except Exception:
            self.state = GenerationState.FAILED
            raise

        self.state = GenerationState.SUCCEEDED
        return GenerateObjectResult(
            object=parsed,
            text=text,
            usage=_field(response, "usage"),
            finish_reason=_field(response, "finishReason", "finish_reason"),
        )

    def _generate_with_retry(self, request: dict[str, Any]) -> Any:
        """Call the collaborator, waiting retry_delay * attempt between failures."""
        max_attempts = max(1, self.retry.max_attempts)
        for attempt in range(1, max_attempts + 1):
            self.attempts = attempt
            try:
                return self.generate_text(**request)
            except Exception as exc:
                if attempt == max_attempts:
                    logger.error("Text generation failed after %d attempts: %s", attempt, exc)
                    raise
                delay = self.retry.retry_delay * attempt
                logger.warning("Text generation failed (%s), retry %d/%d in %.1fs", exc, attempt, max_attempts - 1, delay)
                self.sleep(delay)
