from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChatTrace:
    trace_id: str
    provider: str
    outcome: str
    latency_ms: int
    history_length: int
    fallback_category: str | None = None
    error_class: str | None = None
