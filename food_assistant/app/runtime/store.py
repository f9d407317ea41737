from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from food_assistant.app.llm.contracts import ProviderDescriptor
from food_assistant.app.memory.service import ConversationStore
from food_assistant.app.usage.service import UsageRecorder


@dataclass
class RuntimeStore:
    conversation: ConversationStore = field(default_factory=ConversationStore)
    usage: UsageRecorder = field(default_factory=UsageRecorder)


def build_runtime_store(providers: Iterable[ProviderDescriptor]) -> RuntimeStore:
    return RuntimeStore(
        conversation=ConversationStore(),
        usage=UsageRecorder.from_providers(providers),
    )
