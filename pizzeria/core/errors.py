from __future__ import annotations

from typing import Any


class PizzeriaError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(PizzeriaError):
    status_code = 400


class InvalidCategoryError(ValidationError):
    pass


class InvalidConfigurationError(ValidationError):
    pass


class NotFoundError(PizzeriaError):
    status_code = 404


class UnauthorizedError(PizzeriaError):
    status_code = 401


class ConfigurationError(PizzeriaError):
    status_code = 503


class InternalError(PizzeriaError):
    status_code = 500
