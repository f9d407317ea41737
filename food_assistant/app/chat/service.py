from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Protocol, Sequence

from food_assistant.app.chat.fallback import select_fallback
from food_assistant.app.llm.contracts import ProviderDescriptor
from food_assistant.app.llm.providers import ProviderRequestError, select_provider
from food_assistant.app.memory.contracts import ChatRole, ChatTurn
from food_assistant.app.memory.service import ConversationStore
from food_assistant.app.observability.service import (
    create_chat_trace,
    emit_chat_telemetry,
)

LOGGER = logging.getLogger(__name__)

CONTEXT_WINDOW_TURNS = 6
SYSTEM_PROMPT = (
    "You are a helpful food and cooking assistant. Help with recipes, ingredient "
    "management, food storage tips, expiration dates, freezer advice, and cooking "
    "suggestions. Be practical and concise. Focus on food-related topics. Always "
    "provide a response."
)
SYSTEM_TURN = ChatTurn(role=ChatRole.SYSTEM, content=SYSTEM_PROMPT)


class ChatSender(Protocol):
    async def send(
        self, provider: ProviderDescriptor, messages: Sequence[ChatTurn]
    ) -> str: ...


@dataclass(frozen=True)
class ChatOutcome:
    reply: str
    provider_name: str
    used_fallback: bool
    fallback_category: str | None = None


def build_context_window(
    conversation: ConversationStore,
    limit: int = CONTEXT_WINDOW_TURNS,
) -> tuple[ChatTurn, ...]:
    return (SYSTEM_TURN, *conversation.recent_window(limit))


class ChatOrchestrator:
    def __init__(
        self,
        *,
        conversation: ConversationStore,
        client: ChatSender,
        providers: Sequence[ProviderDescriptor],
        logger: logging.Logger | None = None,
    ) -> None:
        self._conversation = conversation
        self._client = client
        self._providers = tuple(providers)
        self._logger = logger or LOGGER

    async def handle_message(self, message: str) -> ChatOutcome:
        """Answer one user message and record both turns.

        Provider failures never escape: the reply degrades to a keyword-matched
        canned answer, which is recorded as the assistant turn the same way a
        real reply is.
        """
        started_at = time.perf_counter()
        self._conversation.append(ChatTurn(role=ChatRole.USER, content=message))
        window = build_context_window(self._conversation)
        provider = select_provider(self._providers)

        try:
            reply = await self._client.send(provider, window)
        except ProviderRequestError as exc:
            fallback = select_fallback(message)
            self._conversation.append(
                ChatTurn(role=ChatRole.ASSISTANT, content=fallback.text)
            )
            emit_chat_telemetry(
                create_chat_trace(
                    provider=provider.name,
                    outcome="fallback",
                    started_at=started_at,
                    history_length=len(self._conversation),
                    fallback_category=fallback.category,
                    error_class=type(exc.cause).__name__,
                ),
                logger=self._logger,
            )
            return ChatOutcome(
                reply=fallback.text,
                provider_name=provider.name,
                used_fallback=True,
                fallback_category=fallback.category,
            )

        self._conversation.append(ChatTurn(role=ChatRole.ASSISTANT, content=reply))
        emit_chat_telemetry(
            create_chat_trace(
                provider=provider.name,
                outcome="success",
                started_at=started_at,
                history_length=len(self._conversation),
            ),
            logger=self._logger,
        )
        return ChatOutcome(
            reply=reply,
            provider_name=provider.name,
            used_fallback=False,
        )
