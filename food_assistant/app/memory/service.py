from __future__ import annotations

import threading

from food_assistant.app.memory.contracts import ChatTurn

CLEAR_CONFIRMATION = "Conversation cleared!"
DEFAULT_HISTORY_LIMIT = 10


class ConversationStore:
    """Ordered chat history for the single shared conversation.

    Every operation holds one lock, so appends from concurrent requests never
    interleave inside a read-modify-write and readers always see a consistent
    prefix of the history.
    """

    def __init__(self) -> None:
        self._turns: list[ChatTurn] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)

    def append(self, turn: ChatTurn) -> None:
        with self._lock:
            self._turns.append(turn)

    def recent_window(self, limit: int) -> tuple[ChatTurn, ...]:
        if limit <= 0:
            return tuple()
        with self._lock:
            return tuple(self._turns[-limit:])

    def history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> tuple[ChatTurn, ...]:
        return self.recent_window(limit)

    def clear(self) -> str:
        with self._lock:
            self._turns = []
        return CLEAR_CONFIRMATION


def serialize_turns(turns: tuple[ChatTurn, ...]) -> list[dict[str, str]]:
    return [turn.as_message() for turn in turns]
