from __future__ import annotations

from typing import Any


class ApplicationError(Exception):
    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ValidationError(ApplicationError):
    pass


class NotFoundError(ApplicationError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class MenuItemNotFoundError(NotFoundError):
    pass


class CategoryNotFoundError(NotFoundError):
    pass


class PopupNotFoundError(NotFoundError):
    pass


class InvalidTransitionError(ApplicationError):
    pass


class ConflictError(ApplicationError):
    pass


class CategoryNameTakenError(ConflictError):
    pass


class PersistenceError(ApplicationError):
    pass


class NotificationError(ApplicationError):
    pass


def field_error(location: str, message: str, **context: Any) -> dict[str, Any]:
    error: dict[str, Any] = {"loc": location, "msg": message}
    error.update(context)
    return error
