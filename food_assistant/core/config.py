from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import httpx

from food_assistant.app.llm.contracts import (
    ProviderDescriptor,
    ProviderFamily,
    UsageLimit,
    UsageWindow,
)
from food_assistant.core.errors import ConfigurationError

DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "mistralai/mistral-7b-instruct:free"
DEFAULT_HUGGINGFACE_MODEL = "mistralai/Mistral-7B-Instruct-v0.1"
HUGGINGFACE_INFERENCE_URL = "https://api-inference.huggingface.co/models"


@dataclass(frozen=True)
class AppConfig:
    app_name: str
    app_version: str
    environment: str
    port: int
    log_level: str
    supabase_url: str
    supabase_service_key: str
    supabase_ingredients_table: str
    providers: tuple[ProviderDescriptor, ...]


def _read_optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _read_int_env(name: str, default: int) -> int:
    value = _read_optional_env(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_list_env(name: str, default: str) -> list[str]:
    raw = _read_optional_env(name) or default
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


def _parse_families(names: list[str]) -> list[ProviderFamily]:
    families: list[ProviderFamily] = []
    for name in names:
        try:
            family = ProviderFamily(name)
        except ValueError as exc:
            raise ConfigurationError(
                detail=f"Unknown chat provider family {name!r} in CHAT_PROVIDERS"
            ) from exc
        if family not in families:
            families.append(family)
    if not families:
        raise ConfigurationError(detail="CHAT_PROVIDERS must name at least one provider")
    return families


def _read_endpoint_env(name: str, default: str) -> str:
    endpoint = _read_optional_env(name) or default
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(detail=f"{name} is not a valid URL: {exc}") from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise ConfigurationError(detail=f"{name} must be an absolute http(s) URL")
    return endpoint


def _build_provider(
    family: ProviderFamily,
    *,
    app_name: str,
    missing: list[str],
) -> ProviderDescriptor | None:
    if family == ProviderFamily.OPENROUTER:
        api_key = _read_optional_env("OPENROUTER_API_KEY")
        if api_key is None:
            missing.append("OPENROUTER_API_KEY")
            return None
        return ProviderDescriptor(
            name=family.value,
            family=family,
            endpoint=_read_endpoint_env("OPENROUTER_API_URL", DEFAULT_OPENROUTER_URL),
            credential=api_key,
            model=_read_optional_env("OPENROUTER_MODEL") or DEFAULT_OPENROUTER_MODEL,
            usage_limit=UsageLimit(
                window=UsageWindow.DAILY,
                limit=_read_int_env("OPENROUTER_DAILY_LIMIT", default=100),
            ),
            site_url=_read_optional_env("APP_SITE_URL") or "http://localhost:3000",
            app_title=app_name,
        )

    api_key = _read_optional_env("HUGGINGFACE_API_KEY")
    if api_key is None:
        missing.append("HUGGINGFACE_API_KEY")
        return None
    model = _read_optional_env("HUGGINGFACE_MODEL") or DEFAULT_HUGGINGFACE_MODEL
    return ProviderDescriptor(
        name=family.value,
        family=family,
        endpoint=f"{HUGGINGFACE_INFERENCE_URL}/{model}",
        credential=api_key,
        model=model,
        usage_limit=UsageLimit(
            window=UsageWindow.MONTHLY,
            limit=_read_int_env("HUGGINGFACE_MONTHLY_LIMIT", default=1000),
        ),
    )


def load_app_config() -> AppConfig:
    """Read the process configuration from the environment.

    Raises ConfigurationError naming every missing credential, so a
    misconfigured deployment fails at startup instead of on the first request.
    """
    app_name = os.getenv("APP_NAME", "Food Assistant")
    missing: list[str] = []

    supabase_url = _read_optional_env("SUPABASE_URL")
    supabase_service_key = _read_optional_env("SUPABASE_SERVICE_KEY")
    if supabase_url is None:
        missing.append("SUPABASE_URL")
    if supabase_service_key is None:
        missing.append("SUPABASE_SERVICE_KEY")

    families = _parse_families(_read_list_env("CHAT_PROVIDERS", default="openrouter"))
    providers = [
        _build_provider(family, app_name=app_name, missing=missing)
        for family in families
    ]

    if missing:
        raise ConfigurationError(missing=tuple(missing))

    return AppConfig(
        app_name=app_name,
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        environment=os.getenv("APP_ENV", "development"),
        port=_read_int_env("PORT", default=3000),
        log_level=(_read_optional_env("LOG_LEVEL") or "INFO").upper(),
        supabase_url=str(supabase_url),
        supabase_service_key=str(supabase_service_key),
        supabase_ingredients_table=os.getenv(
            "SUPABASE_INGREDIENTS_TABLE", "ingredients"
        ),
        providers=tuple(provider for provider in providers if provider is not None),
    )


def required_env_report() -> dict[str, bool]:
    names = ["SUPABASE_URL", "SUPABASE_SERVICE_KEY"]
    for family in _read_list_env("CHAT_PROVIDERS", default="openrouter"):
        names.append(f"{family.upper()}_API_KEY")
    return {name: _read_optional_env(name) is not None for name in names}


def load_dotenv_file(path: str = ".env") -> list[str]:
    """Apply KEY=value lines from a local env file and return the keys applied.

    Variables already present in the process environment win over the file,
    so the returned list only names keys the file actually supplied.
    """
    env_path = Path(path)
    if not env_path.is_file():
        return []

    applied: list[str] = []
    for key, value in _parse_dotenv(env_path.read_text(encoding="utf-8")):
        if key in os.environ:
            continue
        os.environ[key] = value
        applied.append(key)
    return applied


def _parse_dotenv(text: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for raw_line in text.splitlines():
        line = raw_line.strip().removeprefix("export ").strip()
        if line.startswith("#"):
            continue
        key, separator, value = line.partition("=")
        key = key.strip()
        if not separator or not key:
            continue
        value = value.strip()
        if value[:1] in {'"', "'"} and value.endswith(value[0]) and len(value) > 1:
            value = value[1:-1]
        elif " #" in value:
            value = value.split(" #", 1)[0].rstrip()
        pairs.append((key, value))
    return pairs
