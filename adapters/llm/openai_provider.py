from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import openai
from openai import AsyncOpenAI

from adapters.llm.base import LLMProvider
from pghuman.errors.exceptions import (
    CompletionTimeout,
    CompletionTransportFailure,
    MissingCredential,
)
from pghuman.prompts.contracts import ChatTurn

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
# The API occasionally stalls; give up on the whole call after this long.
DEFAULT_TIMEOUT_SEC = 20.0


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completion provider with an explicit credential and wait ceiling."""

    PROVIDER_ID = "openai"

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url or None
        self.timeout_sec = float(timeout_sec)
        # last call usage/metadata for tracing
        self._last_usage: dict[str, Any] = {}

    def get_last_usage(self) -> dict[str, Any]:
        """Return metadata of the last LLM call (tokens, cost, text_length)."""
        return dict(self._last_usage)

    def _require_credential(self) -> str:
        if not self.api_key:
            raise MissingCredential(
                "No completion API key configured. "
                "Set PGHUMAN_API_KEY or OPENAI_API_KEY."
            )
        return self.api_key

    def _new_client(self) -> AsyncOpenAI:
        # max_retries=0: one request per invocation, failures surface immediately.
        return AsyncOpenAI(
            api_key=self._require_credential(),
            base_url=self.base_url,
            timeout=self.timeout_sec,
            max_retries=0,
        )

    async def _create_chat_completion(self, **kwargs):
        """OpenAI SDK seam for stable unit testing."""
        async with self._new_client() as client:
            return await client.chat.completions.create(**kwargs)

    async def acomplete(self, turns: Sequence[ChatTurn]) -> str:
        self._require_credential()
        messages = [t.to_message() for t in turns]

        try:
            completion = await asyncio.wait_for(
                self._create_chat_completion(model=self.model, messages=messages),
                timeout=self.timeout_sec,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as exc:
            raise CompletionTimeout(
                f"completion did not finish within {self.timeout_sec:g}s",
                extra={"timeout_sec": self.timeout_sec, "model": self.model},
            ) from exc
        except openai.OpenAIError as exc:
            raise CompletionTransportFailure.wrap(
                "completion request failed", exc, model=self.model
            ) from exc

        text = self._first_choice_text(completion)
        self._record_usage(completion, text)
        return text

    def complete(self, turns: Sequence[ChatTurn]) -> str:
        """
        Blocking entry point: runs acomplete() on a private event loop.

        Must not be called from a running event loop; use acomplete() there.
        """
        self._require_credential()
        return asyncio.run(self.acomplete(turns))

    @staticmethod
    def _first_choice_text(completion: Any) -> str:
        choices = getattr(completion, "choices", None)
        if not choices:
            raise CompletionTransportFailure("completion returned no choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise CompletionTransportFailure(
                "completion returned a choice without text content",
                extra={"content_type": type(content).__name__},
            )
        # Verbatim: no stripping, no code-fence removal.
        return content

    def _record_usage(self, completion: Any, text: str) -> None:
        usage = getattr(completion, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", 0) or 0
        completion_tokens = getattr(usage, "completion_tokens", 0) or 0
        self._last_usage = {
            "model": self.model,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "cost_usd": self._estimate_cost(prompt_tokens, completion_tokens),
            "text_length": len(text),
        }
        log.debug("Completion finished", extra=self._last_usage)

    def _estimate_cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        """Estimate cost in USD from token counts."""
        # Pricing per 1K tokens (adjust based on model)
        pricing = {
            "gpt-4": {"input": 0.03, "output": 0.06},
            "gpt-4-turbo": {"input": 0.01, "output": 0.03},
            "gpt-4o": {"input": 0.005, "output": 0.015},
            "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
            "gpt-3.5-turbo": {"input": 0.0005, "output": 0.0015},
        }

        model_pricing = pricing.get(self.model, pricing["gpt-3.5-turbo"])

        input_cost = (prompt_tokens / 1000) * model_pricing["input"]
        output_cost = (completion_tokens / 1000) * model_pricing["output"]

        return input_cost + output_cost
