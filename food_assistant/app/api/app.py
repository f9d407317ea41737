from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from food_assistant.app.chat.service import ChatOrchestrator
from food_assistant.app.ingredients.contracts import IngredientStore
from food_assistant.app.ingredients.service import (
    build_recipe_prompt,
    import_ingredients,
    normalize_changes,
    normalize_draft,
)
from food_assistant.app.ingredients.supabase_store import SupabaseIngredientStore
from food_assistant.app.llm.providers import ProviderClient
from food_assistant.app.memory.service import serialize_turns
from food_assistant.app.runtime.store import RuntimeStore, build_runtime_store
from food_assistant.app.usage.service import serialize_usage
from food_assistant.core.config import AppConfig, load_app_config
from food_assistant.core.errors import ApiError, IngredientStoreError, ValidationError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ChatRequest(BaseModel):
    message: str | None = None


class RecipeSuggestRequest(BaseModel):
    cuisine: str | None = None
    diet: str | None = None
    time: str | None = None


class IngredientRequest(BaseModel):
    name: str | None = None
    category: str | None = None
    quantity: float | None = None
    unit: str | None = None


class IngredientImportRequest(BaseModel):
    ingredients: list[dict[str, Any]] | None = None


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def _call_store(
    operation: Callable[..., T],
    *args: Any,
    failure_message: str,
) -> T:
    try:
        return await asyncio.to_thread(operation, *args)
    except IngredientStoreError as exc:
        LOGGER.exception("ingredient_store_failed %s", failure_message)
        raise ApiError(500, failure_message) from exc


def create_app(
    config: AppConfig | None = None,
    *,
    store: RuntimeStore | None = None,
    ingredient_store: IngredientStore | None = None,
    provider_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    config = config or load_app_config()
    runtime = store or build_runtime_store(config.providers)
    ingredients: IngredientStore = ingredient_store or SupabaseIngredientStore(
        config.supabase_url,
        config.supabase_service_key,
        table_name=config.supabase_ingredients_table,
    )
    orchestrator = ChatOrchestrator(
        conversation=runtime.conversation,
        client=ProviderClient(runtime.usage, transport=provider_transport),
        providers=config.providers,
    )

    app = FastAPI(title=config.app_name, version=config.app_version)
    app.state.runtime_store = runtime
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(
        _request: Request, exc: ValidationError
    ) -> JSONResponse:
        return _error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(400, "Invalid request body")

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "status": f"{config.app_name} backend running",
            "database": "Supabase",
            "version": config.app_version,
        }

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/ingredients")
    async def list_ingredients() -> dict[str, object]:
        rows = await _call_store(
            ingredients.list_all, failure_message="Failed to fetch ingredients"
        )
        return {"success": True, "ingredients": [row.as_dict() for row in rows]}

    @app.post("/ingredients")
    async def add_ingredient(payload: IngredientRequest) -> dict[str, object]:
        draft = normalize_draft(
            payload.name,
            category=payload.category,
            quantity=payload.quantity,
            unit=payload.unit,
        )
        created = await _call_store(
            ingredients.add, draft, failure_message="Failed to add ingredient"
        )
        return {
            "success": True,
            "ingredient": created.as_dict(),
            "message": f"Added {draft.name} to your ingredients",
        }

    @app.post("/ingredients/import")
    async def import_ingredient_list(
        payload: IngredientImportRequest,
    ) -> dict[str, object]:
        if payload.ingredients is None:
            raise ValidationError("Ingredients array is required")
        imported = await _call_store(
            import_ingredients,
            ingredients,
            payload.ingredients,
            failure_message="Failed to import ingredients",
        )
        return {
            "success": True,
            "imported": [row.as_dict() for row in imported],
            "message": f"Imported {len(imported)} ingredients successfully",
        }

    @app.put("/ingredients/{ingredient_id}")
    async def update_ingredient(
        ingredient_id: str, payload: IngredientRequest
    ) -> dict[str, object]:
        changes = normalize_changes(payload.model_dump())
        updated = await _call_store(
            ingredients.update,
            ingredient_id,
            changes,
            failure_message="Failed to update ingredient",
        )
        if updated is None:
            raise ApiError(404, "Ingredient not found")
        return {"success": True, "ingredient": updated.as_dict()}

    @app.delete("/ingredients/{ingredient_id}")
    async def delete_ingredient(ingredient_id: str) -> dict[str, object]:
        await _call_store(
            ingredients.delete,
            ingredient_id,
            failure_message="Failed to delete ingredient",
        )
        return {"success": True, "message": "Ingredient removed successfully"}

    @app.delete("/ingredients")
    async def clear_ingredients() -> dict[str, object]:
        count = await _call_store(
            ingredients.delete_all, failure_message="Failed to clear ingredients"
        )
        return {"success": True, "message": f"Cleared all {count} ingredients"}

    @app.get("/ingredients/search/{query}")
    async def search_ingredients(query: str) -> dict[str, object]:
        rows = await _call_store(
            ingredients.search, query, failure_message="Failed to search ingredients"
        )
        return {"success": True, "ingredients": [row.as_dict() for row in rows]}

    @app.get("/ingredients/category/{category}")
    async def ingredients_by_category(category: str) -> dict[str, object]:
        rows = await _call_store(
            ingredients.by_category,
            category,
            failure_message="Failed to fetch ingredients",
        )
        return {"success": True, "ingredients": [row.as_dict() for row in rows]}

    @app.post("/chat")
    async def chat(payload: ChatRequest) -> dict[str, object]:
        message = (payload.message or "").strip()
        if not message:
            raise ValidationError("Message is required")
        LOGGER.info("chat_received length=%d", len(message))
        outcome = await orchestrator.handle_message(message)
        return {
            "success": True,
            "response": outcome.reply,
            "conversationHistory": serialize_turns(runtime.conversation.history()),
        }

    @app.post("/recipes/suggest")
    async def suggest_recipes(
        payload: RecipeSuggestRequest | None = None,
    ) -> dict[str, object]:
        filters = payload or RecipeSuggestRequest()
        rows = await _call_store(
            ingredients.list_all,
            failure_message="Failed to get recipe suggestions",
        )
        names = [row.name for row in rows]
        prompt = build_recipe_prompt(
            names,
            cuisine=filters.cuisine,
            diet=filters.diet,
            time=filters.time,
        )
        outcome = await orchestrator.handle_message(prompt)
        return {
            "success": True,
            "ingredients": names,
            "suggestions": outcome.reply,
            "filters": filters.model_dump(),
        }

    @app.get("/conversation")
    async def conversation() -> dict[str, object]:
        return {
            "success": True,
            "history": serialize_turns(runtime.conversation.history()),
        }

    @app.post("/conversation/clear")
    async def clear_conversation() -> dict[str, object]:
        return {"success": True, "message": runtime.conversation.clear()}

    @app.get("/usage")
    async def usage() -> dict[str, object]:
        return {"success": True, **serialize_usage(runtime.usage.snapshot())}

    return app
