from __future__ import annotations


class ConfigurationError(Exception):
    def __init__(self, missing: tuple[str, ...] = tuple(), detail: str | None = None):
        self.missing = missing
        message = detail or "Missing required configuration"
        if missing:
            message = f"{message}: {', '.join(missing)}"
        super().__init__(message)


class ValidationError(Exception):
    pass


class IngredientStoreError(Exception):
    pass


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)
