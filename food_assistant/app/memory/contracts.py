from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatTurn:
    role: ChatRole
    content: str

    def as_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}
