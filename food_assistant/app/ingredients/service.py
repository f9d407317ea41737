from __future__ import annotations

from typing import Any, Iterable, Mapping

from food_assistant.app.ingredients.contracts import (
    DEFAULT_CATEGORY,
    DEFAULT_QUANTITY,
    DEFAULT_UNIT,
    Ingredient,
    IngredientDraft,
    IngredientStore,
)
from food_assistant.core.errors import ValidationError

UPDATABLE_FIELDS = ("name", "category", "quantity", "unit")


def normalize_name(name: str) -> str:
    return name.lower().strip()


def normalize_draft(
    name: str | None,
    category: str | None = None,
    quantity: float | None = None,
    unit: str | None = None,
) -> IngredientDraft:
    if not name or not normalize_name(name):
        raise ValidationError("Ingredient name is required")
    return IngredientDraft(
        name=normalize_name(name),
        category=category or DEFAULT_CATEGORY,
        quantity=quantity or DEFAULT_QUANTITY,
        unit=unit or DEFAULT_UNIT,
    )


def normalize_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for field_name in UPDATABLE_FIELDS:
        value = changes.get(field_name)
        if value is None:
            continue
        if field_name == "name":
            if not isinstance(value, str) or not normalize_name(value):
                raise ValidationError("Ingredient name cannot be blank")
            value = normalize_name(value)
        normalized[field_name] = value
    return normalized


def import_ingredients(
    store: IngredientStore,
    entries: Iterable[Mapping[str, Any]],
) -> list[Ingredient]:
    imported: list[Ingredient] = []
    for entry in entries:
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        draft = normalize_draft(
            name,
            category=entry.get("category"),
            quantity=entry.get("quantity"),
            unit=entry.get("unit"),
        )
        imported.append(store.add(draft))
    return imported


def build_recipe_prompt(
    ingredient_names: list[str],
    *,
    cuisine: str | None = None,
    diet: str | None = None,
    time: str | None = None,
) -> str:
    if not ingredient_names:
        raise ValidationError("No ingredients available. Add some ingredients first!")
    parts = [f"I have these ingredients: {', '.join(ingredient_names)}."]
    if cuisine:
        parts.append(f"I want {cuisine} cuisine.")
    if diet:
        parts.append(f"Dietary preference: {diet}.")
    if time:
        parts.append(f"I have {time} to cook.")
    parts.append("What are 2-3 specific recipes I can make?")
    return " ".join(parts)
