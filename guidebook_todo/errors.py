"""Structured error types for task operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ErrorResponse:
    """Serializable error payload carried by every task error."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class TodoError(RuntimeError):
    """Exception carrying a structured error response."""

    code = "TODO_ERROR"

    def __init__(self, message: str, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.error = ErrorResponse(
            code=self.code, message=message, details=dict(details or {})
        )

    @property
    def message(self) -> str:
        return self.error.message


class ValidationError(TodoError):
    """A task field violates its length or emptiness rule."""

    code = "VALIDATION_ERROR"


class NotFoundError(TodoError):
    code = "NOT_FOUND"


class InvalidValueError(TodoError):
    """A status or priority string could not be parsed."""

    code = "INVALID_VALUE"


class StorageError(TodoError):
    """Reading, writing or parsing the task file failed."""

    code = "IO_ERROR"


class ExternalToolError(TodoError):
    """A git or editor invocation failed; stderr is kept in the details."""

    code = "EXTERNAL_TOOL_ERROR"


class NotInitializedError(TodoError):
    code = "NOT_INITIALIZED"

