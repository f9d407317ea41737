from __future__ import annotations

from typing import Any

import pytest

from food_assistant.app.ingredients.service import (
    build_recipe_prompt,
    import_ingredients,
    normalize_changes,
    normalize_draft,
)
from food_assistant.app.ingredients.supabase_store import SupabaseIngredientStore
from food_assistant.core.errors import IngredientStoreError, ValidationError


def test_normalize_draft_lowercases_and_applies_defaults() -> None:
    draft = normalize_draft("  Fresh Basil ")

    assert draft.name == "fresh basil"
    assert draft.category == "uncategorized"
    assert draft.quantity == 1
    assert draft.unit == "unit"


def test_normalize_draft_requires_name() -> None:
    with pytest.raises(ValidationError, match="name is required"):
        normalize_draft(None)
    with pytest.raises(ValidationError):
        normalize_draft("   ")


def test_normalize_changes_keeps_only_provided_fields() -> None:
    changes = normalize_changes(
        {"name": " Tomato ", "category": None, "quantity": 3, "unit": None}
    )

    assert changes == {"name": "tomato", "quantity": 3}


def test_import_skips_entries_without_name(ingredient_store) -> None:
    imported = import_ingredients(
        ingredient_store,
        [{"name": "Onion", "unit": "bulb"}, {"category": "dairy"}, {"name": " "}],
    )

    assert [row.name for row in imported] == ["onion"]
    assert imported[0].unit == "bulb"


def test_build_recipe_prompt_with_filters() -> None:
    prompt = build_recipe_prompt(
        ["rice", "egg"], cuisine="Korean", diet="vegetarian", time="20 minutes"
    )

    assert prompt == (
        "I have these ingredients: rice, egg. I want Korean cuisine. "
        "Dietary preference: vegetarian. I have 20 minutes to cook. "
        "What are 2-3 specific recipes I can make?"
    )


def test_build_recipe_prompt_without_ingredients() -> None:
    with pytest.raises(ValidationError, match="No ingredients available"):
        build_recipe_prompt([])


class _FakeResponse:
    def __init__(self, data: Any, count: int | None = None) -> None:
        self.data = data
        self.count = count


class _FakeQuery:
    def __init__(self, client: "_FakeSupabaseClient", table: str) -> None:
        self.client = client
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = [
            ("table", (table,), {})
        ]
        client.queries.append(self)

    def __getattr__(self, name: str):
        def _record(*args: Any, **kwargs: Any) -> "_FakeQuery":
            self.calls.append((name, args, kwargs))
            return self

        return _record

    def execute(self) -> _FakeResponse:
        if self.client.error is not None:
            raise self.client.error
        return self.client.response


class _FakeSupabaseClient:
    def __init__(self, response: _FakeResponse, error: Exception | None = None):
        self.response = response
        self.error = error
        self.queries: list[_FakeQuery] = []

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self, name)


def _store(client: _FakeSupabaseClient) -> SupabaseIngredientStore:
    return SupabaseIngredientStore(
        "https://supabase.test", "key", table_name="ingredients", client=client
    )


def test_supabase_list_all_orders_newest_first() -> None:
    client = _FakeSupabaseClient(
        _FakeResponse(
            [
                {"id": 2, "name": "milk", "category": "dairy", "quantity": 1, "unit": "l"},
                {"bad": "row"},
            ]
        )
    )

    rows = _store(client).list_all()

    assert [row.name for row in rows] == ["milk"]
    assert ("order", ("added_date",), {"desc": True}) in client.queries[0].calls


def test_supabase_update_missing_row_returns_none() -> None:
    client = _FakeSupabaseClient(_FakeResponse([]))

    assert _store(client).update("42", {"unit": "g"}) is None
    assert ("eq", ("id", "42"), {}) in client.queries[0].calls


def test_supabase_search_uses_ilike() -> None:
    client = _FakeSupabaseClient(_FakeResponse([]))

    _store(client).search("tom")

    assert ("ilike", ("name", "%tom%"), {}) in client.queries[0].calls


def test_supabase_delete_all_returns_count() -> None:
    client = _FakeSupabaseClient(_FakeResponse([], count=7))

    assert _store(client).delete_all() == 7
    assert ("neq", ("id", 0), {}) in client.queries[0].calls


def test_supabase_errors_are_wrapped() -> None:
    client = _FakeSupabaseClient(_FakeResponse([]), error=RuntimeError("network"))

    with pytest.raises(IngredientStoreError) as excinfo:
        _store(client).list_all()

    assert isinstance(excinfo.value.__cause__, RuntimeError)
