from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UsageCounter:
    window: str
    window_used: int
    window_limit: int
