from __future__ import annotations

import threading

from food_assistant.app.memory.contracts import ChatRole, ChatTurn
from food_assistant.app.memory.service import (
    CLEAR_CONFIRMATION,
    ConversationStore,
    serialize_turns,
)


def _user(content: str) -> ChatTurn:
    return ChatTurn(role=ChatRole.USER, content=content)


def test_recent_window_returns_last_turns_in_order() -> None:
    store = ConversationStore()
    for index in range(9):
        store.append(_user(f"turn-{index}"))

    window = store.recent_window(4)

    assert [turn.content for turn in window] == [
        "turn-5",
        "turn-6",
        "turn-7",
        "turn-8",
    ]


def test_recent_window_shorter_history_returns_everything() -> None:
    store = ConversationStore()
    store.append(_user("only"))

    assert store.recent_window(6) == (_user("only"),)
    assert store.recent_window(0) == tuple()


def test_clear_empties_history_and_is_idempotent() -> None:
    store = ConversationStore()
    store.append(_user("hello"))

    first = store.clear()
    second = store.clear()

    assert first == CLEAR_CONFIRMATION
    assert second == CLEAR_CONFIRMATION
    assert store.recent_window(10) == tuple()
    assert len(store) == 0


def test_history_defaults_to_last_ten_turns() -> None:
    store = ConversationStore()
    for index in range(15):
        store.append(_user(str(index)))

    history = store.history()

    assert len(history) == 10
    assert history[0].content == "5"


def test_serialize_turns_uses_wire_roles() -> None:
    turns = (_user("hi"), ChatTurn(role=ChatRole.ASSISTANT, content="hello"))

    assert serialize_turns(turns) == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_concurrent_appends_are_all_recorded() -> None:
    store = ConversationStore()

    def _worker(prefix: str) -> None:
        for index in range(200):
            store.append(_user(f"{prefix}-{index}"))

    threads = [threading.Thread(target=_worker, args=(name,)) for name in "abcd"]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 800
    a_turns = [t.content for t in store.recent_window(800) if t.content.startswith("a-")]
    assert a_turns == [f"a-{index}" for index in range(200)]
