from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

DEFAULT_CATEGORY = "uncategorized"
DEFAULT_QUANTITY = 1
DEFAULT_UNIT = "unit"


@dataclass(frozen=True)
class IngredientDraft:
    name: str
    category: str = DEFAULT_CATEGORY
    quantity: float = DEFAULT_QUANTITY
    unit: str = DEFAULT_UNIT

    def as_row(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "unit": self.unit,
        }


@dataclass(frozen=True)
class Ingredient:
    id: int | str
    name: str
    category: str
    quantity: float
    unit: str
    added_date: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "unit": self.unit,
            "added_date": self.added_date,
        }


class IngredientStore(Protocol):
    def list_all(self) -> list[Ingredient]: ...

    def add(self, draft: IngredientDraft) -> Ingredient: ...

    def update(self, ingredient_id: str, changes: dict[str, Any]) -> Ingredient | None: ...

    def delete(self, ingredient_id: str) -> None: ...

    def delete_all(self) -> int: ...

    def search(self, query: str) -> list[Ingredient]: ...

    def by_category(self, category: str) -> list[Ingredient]: ...
