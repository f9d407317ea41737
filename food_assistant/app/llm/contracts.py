from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProviderFamily(str, Enum):
    OPENROUTER = "openrouter"
    HUGGINGFACE = "huggingface"


class UsageWindow(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class UsageLimit:
    window: UsageWindow
    limit: int


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    family: ProviderFamily
    endpoint: str
    credential: str
    model: str
    usage_limit: UsageLimit | None = None
    site_url: str | None = None
    app_title: str | None = None

    def __repr__(self) -> str:
        return (
            f"ProviderDescriptor(name={self.name!r}, family={self.family.value!r}, "
            f"endpoint={self.endpoint!r}, model={self.model!r})"
        )
