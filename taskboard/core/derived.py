"""Derived values computed from task/user snapshots at read time."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from taskboard.core.schemas import TaskView, UserView

STATUS_PROGRESS = {
    "pending": 0,
    "in-progress": 50,
    "completed": 100,
    "cancelled": 0,
}

# Statuses excluded from the overdue query (the per-task flag only excludes "completed").
CLOSED_STATUSES = ("completed", "cancelled")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_overdue(due_date: datetime, status: str, now: Optional[datetime] = None) -> bool:
    """True when the due date is strictly in the past and the task is not completed."""
    now = as_utc(now) or utcnow()
    return as_utc(due_date) < now and status != "completed"


def progress_percent(status: str) -> int:
    return STATUS_PROGRESS.get(status, 0)


def task_summary(task: "TaskView", now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "priority": task.priority,
        "dueDate": task.due_date,
        "isOverdue": is_overdue(task.due_date, task.status, now),
    }


def user_profile(user: "UserView") -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "isActive": user.is_active,
        "createdAt": user.created_at,
    }
