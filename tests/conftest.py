from __future__ import annotations

from typing import Any, Callable

import pytest

from food_assistant.app.ingredients.contracts import Ingredient, IngredientDraft
from food_assistant.app.llm.contracts import (
    ProviderDescriptor,
    ProviderFamily,
    UsageLimit,
    UsageWindow,
)
from food_assistant.app.runtime.store import RuntimeStore, build_runtime_store
from food_assistant.core.config import AppConfig
from food_assistant.core.errors import IngredientStoreError

OPENROUTER_TEST_URL = "https://openrouter.test/api/v1/chat/completions"


def _make_openrouter_provider(**overrides: object) -> ProviderDescriptor:
    values: dict[str, Any] = {
        "name": "openrouter",
        "family": ProviderFamily.OPENROUTER,
        "endpoint": OPENROUTER_TEST_URL,
        "credential": "or-test-key",
        "model": "mistralai/mistral-7b-instruct:free",
        "usage_limit": UsageLimit(window=UsageWindow.DAILY, limit=100),
        "site_url": "http://localhost:3000",
        "app_title": "Food Assistant",
    }
    values.update(overrides)
    return ProviderDescriptor(**values)


def _make_huggingface_provider() -> ProviderDescriptor:
    return ProviderDescriptor(
        name="huggingface",
        family=ProviderFamily.HUGGINGFACE,
        endpoint="https://hf.test/models/mistralai/Mistral-7B-Instruct-v0.1",
        credential="hf-test-key",
        model="mistralai/Mistral-7B-Instruct-v0.1",
        usage_limit=UsageLimit(window=UsageWindow.MONTHLY, limit=1000),
    )


class FakeIngredientStore:
    def __init__(self) -> None:
        self.rows: list[Ingredient] = []
        self.fail = False
        self._next_id = 1

    def _guard(self) -> None:
        if self.fail:
            raise IngredientStoreError("store offline")

    def list_all(self) -> list[Ingredient]:
        self._guard()
        return list(reversed(self.rows))

    def add(self, draft: IngredientDraft) -> Ingredient:
        self._guard()
        row = Ingredient(
            id=self._next_id,
            name=draft.name,
            category=draft.category,
            quantity=draft.quantity,
            unit=draft.unit,
            added_date=f"2026-10-19T00:00:0{self._next_id % 10}Z",
        )
        self._next_id += 1
        self.rows.append(row)
        return row

    def update(self, ingredient_id: str, changes: dict[str, Any]) -> Ingredient | None:
        self._guard()
        for index, row in enumerate(self.rows):
            if str(row.id) == str(ingredient_id):
                values = row.as_dict()
                values.update(changes)
                self.rows[index] = Ingredient(**values)
                return self.rows[index]
        return None

    def delete(self, ingredient_id: str) -> None:
        self._guard()
        self.rows = [row for row in self.rows if str(row.id) != str(ingredient_id)]

    def delete_all(self) -> int:
        self._guard()
        count = len(self.rows)
        self.rows = []
        return count

    def search(self, query: str) -> list[Ingredient]:
        self._guard()
        needle = query.lower()
        return sorted(
            (row for row in self.rows if needle in row.name.lower()),
            key=lambda row: row.name,
        )

    def by_category(self, category: str) -> list[Ingredient]:
        self._guard()
        return sorted(
            (row for row in self.rows if row.category == category),
            key=lambda row: row.name,
        )


@pytest.fixture
def openrouter_provider() -> ProviderDescriptor:
    return _make_openrouter_provider()


@pytest.fixture
def huggingface_provider() -> ProviderDescriptor:
    return _make_huggingface_provider()


@pytest.fixture
def provider_factory() -> Callable[..., ProviderDescriptor]:
    return _make_openrouter_provider


@pytest.fixture
def app_config(openrouter_provider: ProviderDescriptor) -> AppConfig:
    return AppConfig(
        app_name="Food Assistant",
        app_version="0.1.0",
        environment="test",
        port=3000,
        log_level="INFO",
        supabase_url="https://supabase.test",
        supabase_service_key="service-key",
        supabase_ingredients_table="ingredients",
        providers=(openrouter_provider,),
    )


@pytest.fixture
def runtime_store(app_config: AppConfig) -> RuntimeStore:
    return build_runtime_store(app_config.providers)


@pytest.fixture
def ingredient_store() -> FakeIngredientStore:
    return FakeIngredientStore()
