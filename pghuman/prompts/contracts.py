from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal

Role = Literal["system", "user"]


@dataclass(frozen=True)
class ChatTurn:
    role: Role
    content: str

    def to_message(self) -> Dict[str, str]:
        """Shape expected by the chat completions API."""
        return {"role": self.role, "content": self.content}
