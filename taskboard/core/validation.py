"""
Pure validation — documents in, lists of violations out.

Each violation is ``{"field": <camelCase field>, "message": <human text>}``.
All violated fields are reported, not only the first. Messages keep the
wording clients of the REST surface already rely on.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskboard.core.schemas import (
    TASK_STATUSES,
    CommentDocument,
    NewUser,
    TaskDocument,
    UserDocument,
)
from taskboard.engine.security import MAX_PASSWORD_BYTES

M = TypeVar("M", bound=BaseModel)

Violation = Dict[str, str]

MESSAGES: Dict[Tuple[str, str], str] = {
    ("name", "missing"): "Please add a name",
    ("name", "string_too_short"): "Please add a name",
    ("name", "string_too_long"): "Name cannot be more than 50 characters",
    ("email", "missing"): "Please add an email",
    ("email", "string_too_short"): "Please add an email",
    ("email", "string_pattern_mismatch"): "Please add a valid email",
    ("password", "missing"): "Please add a password",
    ("role", "literal_error"): "Role must be one of: user, admin",
    ("title", "missing"): "Please add a task title",
    ("title", "string_too_short"): "Please add a task title",
    ("title", "string_too_long"): "Title cannot be more than 100 characters",
    ("description", "missing"): "Please add a description",
    ("description", "string_too_short"): "Please add a description",
    ("description", "string_too_long"): "Description cannot be more than 500 characters",
    ("status", "literal_error"): "Status must be one of: pending, in-progress, completed, cancelled",
    ("priority", "literal_error"): "Priority must be one of: low, medium, high, urgent",
    ("dueDate", "missing"): "Please add a due date",
    ("assignedTo", "missing"): "Please assign the task to a user",
    ("text", "missing"): "Please add comment text",
    ("text", "string_too_short"): "Please add comment text",
    ("text", "string_too_long"): "Comment cannot be more than 1000 characters",
    ("user", "missing"): "Please specify the comment author",
}

FIELD_FALLBACKS: Dict[str, str] = {
    "dueDate": "Due date must be a valid date",
}


def _message_for(field: str, error: Dict[str, Any]) -> str:
    err_type = error["type"]
    if (field, err_type) in MESSAGES:
        return MESSAGES[(field, err_type)]
    if err_type == "value_error":
        return str(error["ctx"]["error"])
    return FIELD_FALLBACKS.get(field, error["msg"])


def _drop_empty(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Keys explicitly set to None count as absent."""
    return {k: v for k, v in data.items() if v is not None}


def check_document(model: Type[M], data: Mapping[str, Any]) -> Tuple[Optional[M], List[Violation]]:
    """
    Validate *data* against *model*.

    Returns:
        (instance, []) on success, (None, violations) on failure.
    """
    try:
        return model.model_validate(_drop_empty(data)), []
    except PydanticValidationError as exc:
        violations: List[Violation] = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "__root__"
            violation = {"field": field, "message": _message_for(field, error)}
            if violation not in violations:
                violations.append(violation)
        return None, violations


def check_password(password: Any, min_length: int = 6) -> List[Violation]:
    if not isinstance(password, str) or not password:
        return [{"field": "password", "message": "Please add a password"}]
    if len(password) < min_length:
        return [{
            "field": "password",
            "message": f"Password must be at least {min_length} characters",
        }]
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return [{
            "field": "password",
            "message": f"Password cannot be more than {MAX_PASSWORD_BYTES} bytes",
        }]
    return []


def validate_new_user(
    data: Mapping[str, Any], password_min_length: int = 6
) -> Tuple[Optional[NewUser], List[Violation]]:
    """Validate a user creation payload, password included."""
    user, violations = check_document(NewUser, data)
    if not any(v["field"] == "password" for v in violations):
        violations.extend(check_password(data.get("password"), password_min_length))
    if violations:
        return None, violations
    return user, []


def validate_user_document(data: Mapping[str, Any]) -> Tuple[Optional[UserDocument], List[Violation]]:
    """Validate a full (merged) user document without its password."""
    return check_document(UserDocument, data)


def validate_task_document(data: Mapping[str, Any]) -> Tuple[Optional[TaskDocument], List[Violation]]:
    """Validate a full (merged) task document."""
    return check_document(TaskDocument, data)


def validate_comment(user_id: Any, text: Any) -> Tuple[Optional[CommentDocument], List[Violation]]:
    return check_document(CommentDocument, {"user": user_id, "text": text})


def validate_status(status: Any) -> List[Violation]:
    """Violations for a bare status value."""
    if status in TASK_STATUSES:
        return []
    return [{"field": "status", "message": MESSAGES[("status", "literal_error")]}]
