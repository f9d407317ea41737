from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from food_assistant.app.llm.contracts import ProviderDescriptor, ProviderFamily
from food_assistant.app.memory.contracts import ChatTurn
from food_assistant.app.usage.service import UsageRecorder
from food_assistant.core.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

PROVIDER_TIMEOUT_SECONDS = 30.0
MAX_REPLY_TOKENS = 500
HUGGINGFACE_TEMPERATURE = 0.7


class ResponseShapeError(Exception):
    pass


class MalformedResponseError(ResponseShapeError):
    pass


class EmptyReplyError(ResponseShapeError):
    pass


class ProviderRequestError(Exception):
    def __init__(self, provider_name: str, cause: BaseException) -> None:
        self.provider_name = provider_name
        self.cause = cause
        super().__init__(f"{provider_name} service error: {cause}")


class ProviderAdapter:
    family: ProviderFamily

    def build_payload(
        self, provider: ProviderDescriptor, messages: Sequence[ChatTurn]
    ) -> dict[str, Any]:
        raise NotImplementedError

    def build_headers(self, provider: ProviderDescriptor) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {provider.credential}",
            "Content-Type": "application/json",
        }

    def extract_reply(self, provider: ProviderDescriptor, raw: Any) -> str:
        raise NotImplementedError


class OpenRouterAdapter(ProviderAdapter):
    family = ProviderFamily.OPENROUTER

    def build_payload(
        self, provider: ProviderDescriptor, messages: Sequence[ChatTurn]
    ) -> dict[str, Any]:
        return {
            "model": provider.model,
            "messages": [turn.as_message() for turn in messages],
            "max_tokens": MAX_REPLY_TOKENS,
        }

    def build_headers(self, provider: ProviderDescriptor) -> dict[str, str]:
        headers = super().build_headers(provider)
        if provider.site_url:
            headers["HTTP-Referer"] = provider.site_url
        if provider.app_title:
            headers["X-Title"] = provider.app_title
        return headers

    def extract_reply(self, provider: ProviderDescriptor, raw: Any) -> str:
        if not isinstance(raw, dict):
            raise MalformedResponseError("Response body is not an object")
        choices = raw.get("choices")
        if not isinstance(choices, list) or not choices:
            raise MalformedResponseError("No choices in response")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise MalformedResponseError("First choice has no message")
        return _require_text(message.get("content"))


class HuggingFaceAdapter(ProviderAdapter):
    family = ProviderFamily.HUGGINGFACE

    def build_payload(
        self, provider: ProviderDescriptor, messages: Sequence[ChatTurn]
    ) -> dict[str, Any]:
        last_message = messages[-1].content if messages else ""
        return {
            "inputs": last_message,
            "parameters": {
                "max_new_tokens": MAX_REPLY_TOKENS,
                "temperature": HUGGINGFACE_TEMPERATURE,
            },
        }

    def extract_reply(self, provider: ProviderDescriptor, raw: Any) -> str:
        if not isinstance(raw, list) or not raw or not isinstance(raw[0], dict):
            raise MalformedResponseError("Expected a list of generations")
        return _require_text(raw[0].get("generated_text"))


_ADAPTERS: dict[ProviderFamily, ProviderAdapter] = {
    ProviderFamily.OPENROUTER: OpenRouterAdapter(),
    ProviderFamily.HUGGINGFACE: HuggingFaceAdapter(),
}


def _require_text(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise EmptyReplyError("Empty response content")
    return value


def adapter_for(family: ProviderFamily) -> ProviderAdapter:
    try:
        return _ADAPTERS[family]
    except KeyError as exc:
        raise ConfigurationError(
            detail=f"No request adapter for provider family {family!r}"
        ) from exc


def select_provider(providers: Sequence[ProviderDescriptor]) -> ProviderDescriptor:
    # Fixed choice: the first configured provider always wins. The rest of the
    # list is configuration only, there is no failover.
    if not providers:
        raise ConfigurationError(detail="No chat provider configured")
    return providers[0]


class ProviderClient:
    def __init__(
        self,
        usage: UsageRecorder,
        *,
        timeout_seconds: float = PROVIDER_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._usage = usage
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def send(
        self, provider: ProviderDescriptor, messages: Sequence[ChatTurn]
    ) -> str:
        adapter = adapter_for(provider.family)
        payload = adapter.build_payload(provider, messages)
        LOGGER.info(
            "provider_request provider=%s model=%s messages=%d",
            provider.name,
            provider.model,
            len(messages),
        )
        try:
            # httpx timeouts apply per connect/read/write step; wait_for caps
            # the whole exchange, including a slowly streamed body.
            response = await asyncio.wait_for(
                self._post(provider, adapter, payload),
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            reply = adapter.extract_reply(provider, response.json())
        except (
            asyncio.TimeoutError,
            httpx.HTTPError,
            httpx.InvalidURL,
            ValueError,
            ResponseShapeError,
        ) as exc:
            LOGGER.warning(
                "provider_failed provider=%s error_class=%s error=%s",
                provider.name,
                type(exc).__name__,
                exc,
            )
            raise ProviderRequestError(provider.name, exc) from exc

        self._usage.record(provider.name)
        return reply

    async def _post(
        self,
        provider: ProviderDescriptor,
        adapter: ProviderAdapter,
        payload: dict[str, Any],
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._timeout_seconds, transport=self._transport
        ) as client:
            return await client.post(
                provider.endpoint,
                headers=adapter.build_headers(provider),
                json=payload,
            )
