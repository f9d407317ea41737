from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable

from food_assistant.app.llm.contracts import ProviderDescriptor, UsageWindow
from food_assistant.app.usage.contracts import UsageCounter
from food_assistant.core.errors import ConfigurationError

# /usage merges the counters into its response envelope.
RESERVED_USAGE_KEYS = frozenset({"success"})


class UsageRecorder:
    """Per-provider request counters.

    Counters are observational only: nothing reads them to block a request,
    and windows never roll over, so a daily count keeps growing until the
    process restarts.
    """

    def __init__(self, counters: dict[str, UsageCounter] | None = None) -> None:
        self._counters: dict[str, UsageCounter] = dict(counters or {})
        self._lock = threading.Lock()

    @classmethod
    def from_providers(cls, providers: Iterable[ProviderDescriptor]) -> UsageRecorder:
        counters: dict[str, UsageCounter] = {}
        for provider in providers:
            if provider.name in RESERVED_USAGE_KEYS:
                raise ConfigurationError(
                    detail=f"Provider name {provider.name!r} is reserved"
                )
            limit = provider.usage_limit
            counters[provider.name] = UsageCounter(
                window=(limit.window if limit else UsageWindow.DAILY).value,
                window_used=0,
                window_limit=limit.limit if limit else 0,
            )
        return cls(counters)

    def record(self, provider_name: str) -> None:
        with self._lock:
            current = self._counters.get(provider_name) or UsageCounter(
                window=UsageWindow.DAILY.value, window_used=0, window_limit=0
            )
            self._counters[provider_name] = replace(
                current, window_used=current.window_used + 1
            )

    def snapshot(self) -> dict[str, UsageCounter]:
        with self._lock:
            return dict(self._counters)


def serialize_usage(counters: dict[str, UsageCounter]) -> dict[str, dict[str, object]]:
    return {
        name: {
            "window": counter.window,
            "window_used": counter.window_used,
            "window_limit": counter.window_limit,
        }
        for name, counter in counters.items()
    }
