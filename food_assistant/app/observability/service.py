from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from uuid import uuid4

from food_assistant.app.observability.contracts import ChatTrace


def create_chat_trace(
    *,
    provider: str,
    outcome: str,
    started_at: float,
    history_length: int,
    fallback_category: str | None = None,
    error_class: str | None = None,
) -> ChatTrace:
    elapsed_ms = int((time.perf_counter() - started_at) * 1000)
    return ChatTrace(
        trace_id=f"trace-{uuid4().hex[:10]}",
        provider=provider,
        outcome=outcome,
        latency_ms=max(elapsed_ms, 0),
        history_length=history_length,
        fallback_category=fallback_category,
        error_class=error_class,
    )


def emit_chat_telemetry(
    trace: ChatTrace,
    logger: logging.Logger | None = None,
) -> None:
    active_logger = logger or logging.getLogger(__name__)
    active_logger.info("chat_event %s", json.dumps(asdict(trace), sort_keys=True))
