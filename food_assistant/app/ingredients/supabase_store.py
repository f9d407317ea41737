from __future__ import annotations

import logging
from typing import Any

from supabase import Client, create_client

from food_assistant.app.ingredients.contracts import Ingredient, IngredientDraft
from food_assistant.core.errors import IngredientStoreError

LOGGER = logging.getLogger(__name__)


def _row_to_ingredient(row: object) -> Ingredient | None:
    if not isinstance(row, dict):
        return None
    ingredient_id = row.get("id")
    name = row.get("name")
    if not isinstance(ingredient_id, (int, str)) or not isinstance(name, str):
        return None
    quantity = row.get("quantity")
    added_date = row.get("added_date")
    return Ingredient(
        id=ingredient_id,
        name=name,
        category=str(row.get("category") or "uncategorized"),
        quantity=quantity if isinstance(quantity, (int, float)) else 1,
        unit=str(row.get("unit") or "unit"),
        added_date=added_date if isinstance(added_date, str) else None,
    )


def _rows_to_ingredients(rows: object) -> list[Ingredient]:
    if not isinstance(rows, list):
        return []
    return [item for row in rows if (item := _row_to_ingredient(row))]


class SupabaseIngredientStore:
    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        table_name: str = "ingredients",
        client: Client | None = None,
    ) -> None:
        self._table_name = table_name
        self._client: Client = client or create_client(supabase_url, supabase_key)

    def _execute(self, operation: str, query: Any) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            raise IngredientStoreError(
                f"Supabase {operation} on {self._table_name} failed"
            ) from exc

    def list_all(self) -> list[Ingredient]:
        query = (
            self._client.table(self._table_name)
            .select("*")
            .order("added_date", desc=True)
        )
        return _rows_to_ingredients(self._execute("select", query).data)

    def add(self, draft: IngredientDraft) -> Ingredient:
        query = self._client.table(self._table_name).insert([draft.as_row()])
        rows = _rows_to_ingredients(self._execute("insert", query).data)
        if not rows:
            raise IngredientStoreError("Supabase insert returned no row")
        return rows[0]

    def update(self, ingredient_id: str, changes: dict[str, Any]) -> Ingredient | None:
        query = (
            self._client.table(self._table_name)
            .update(changes)
            .eq("id", ingredient_id)
        )
        rows = _rows_to_ingredients(self._execute("update", query).data)
        return rows[0] if rows else None

    def delete(self, ingredient_id: str) -> None:
        query = self._client.table(self._table_name).delete().eq("id", ingredient_id)
        self._execute("delete", query)

    def delete_all(self) -> int:
        query = (
            self._client.table(self._table_name)
            .delete(count="exact")
            .neq("id", 0)
        )
        response = self._execute("delete", query)
        if isinstance(response.count, int):
            return response.count
        return len(response.data) if isinstance(response.data, list) else 0

    def search(self, query: str) -> list[Ingredient]:
        request = (
            self._client.table(self._table_name)
            .select("*")
            .ilike("name", f"%{query}%")
            .order("name")
        )
        return _rows_to_ingredients(self._execute("search", request).data)

    def by_category(self, category: str) -> list[Ingredient]:
        query = (
            self._client.table(self._table_name)
            .select("*")
            .eq("category", category)
            .order("name")
        )
        return _rows_to_ingredients(self._execute("select", query).data)
