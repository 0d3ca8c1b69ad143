from __future__ import annotations

from typing import Protocol, Sequence

from pghuman.prompts.contracts import ChatTurn


class LLMProvider(Protocol):
    PROVIDER_ID: str

    def complete(self, turns: Sequence[ChatTurn]) -> str:
        """Return the text of the first generated choice, verbatim."""

    async def acomplete(self, turns: Sequence[ChatTurn]) -> str:
        """Coroutine form of complete() for callers already inside an event loop."""
