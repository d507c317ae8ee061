"""
Taskboard Error Hierarchy — structured exceptions shared by stores and the API.

Expected conditions (not found, validation, duplicates) are *returned* by the
stores inside a StoreResult; only unexpected faults are raised. Every error
knows the HTTP status it maps to and the message that is safe to show a
client.

Hierarchy:
    TaskboardError
    ├── NotFoundError              — Valid id, no record (404)
    ├── InvalidIdentifierError     — Malformed id (400)
    ├── ValidationError            — Field-level violations, aggregated (400)
    ├── DuplicateEmailError        — Email already registered (400)
    ├── AssignedUserNotFoundError  — assignedTo names no user (400)
    ├── PasswordComparisonError    — bcrypt itself failed (500)
    ├── InternalError              — Persistence fault (500, "Server Error")
    └── ConfigError                — Invalid taskboard.yaml / environment
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SERVER_ERROR_MESSAGE = "Server Error"


class TaskboardError(Exception):
    """
    Base error for all Taskboard failures.
    All context is serializable to JSON for logging.
    """

    status_code: int = 500

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message that may be returned to an HTTP client."""
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            "timestamp": self.timestamp,
            "context": {k: str(v) for k, v in self.context.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        return f"{self.error_type}: {self.message}"


class NotFoundError(TaskboardError):
    """Identifier is well-formed but no record exists."""

    status_code = 404

    def __init__(self, message: str, **context: Any):
        self.resource: Optional[str] = context.get("resource")
        self.resource_id: Optional[str] = context.get("resource_id")
        super().__init__(message, **context)


class InvalidIdentifierError(TaskboardError):
    """Identifier does not have the shape of a record id."""

    status_code = 400

    def __init__(self, message: str, **context: Any):
        self.raw_value: Optional[str] = context.get("raw_value")
        super().__init__(message, **context)


class ValidationError(TaskboardError):
    """
    One or more field constraints were violated.
    Carries every violation, not only the first.
    """

    status_code = 400

    def __init__(self, message: str, **context: Any):
        self.violations: List[Dict[str, str]] = list(context.pop("violations", None) or [])
        super().__init__(message, **context)

    @classmethod
    def from_violations(cls, violations: List[Dict[str, str]]) -> "ValidationError":
        return cls("Validation failed", violations=violations)

    @property
    def fields(self) -> List[str]:
        return [v["field"] for v in self.violations]

    @property
    def public_message(self) -> str:
        if not self.violations:
            return self.message
        return ", ".join(v["message"] for v in self.violations)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["violations"] = self.violations
        return d


class DuplicateEmailError(TaskboardError):
    """Another user already holds this email (case-insensitive)."""

    status_code = 400

    def __init__(self, message: str, **context: Any):
        self.email: Optional[str] = context.get("email")
        super().__init__(message, **context)


class AssignedUserNotFoundError(TaskboardError):
    """
    The user named by a task's assignedTo does not exist.
    A problem with the request body, so 400 rather than 404.
    """

    status_code = 400

    def __init__(self, message: str = "Assigned user not found", **context: Any):
        self.user_id: Optional[str] = context.get("user_id")
        super().__init__(message, **context)


class PasswordComparisonError(TaskboardError):
    """The hash comparison primitive raised instead of answering."""

    @property
    def public_message(self) -> str:
        return SERVER_ERROR_MESSAGE


class InternalError(TaskboardError):
    """Unexpected persistence fault. Details never reach the client."""

    @property
    def public_message(self) -> str:
        return SERVER_ERROR_MESSAGE


class ConfigError(TaskboardError):
    """Configuration error — invalid taskboard.yaml or environment override."""
    pass
