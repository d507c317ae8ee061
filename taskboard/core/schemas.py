"""
Data shapes — pydantic models for inbound documents and outbound views.

Inbound models describe what a *valid* document looks like; they are run by
taskboard.core.validation, never by the stores directly. Outbound views are
what the stores return: they have no password field at all, and they dump
with camelCase keys (``isActive``, ``dueDate``, ``assignedTo``).
"""

from datetime import datetime
from typing import List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from taskboard.core.derived import as_utc
from taskboard.core.identifiers import normalize_identifier

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$"

UserRole = Literal["user", "admin"]
TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]

USER_ROLES = get_args(UserRole)
TASK_STATUSES = get_args(TaskStatus)
TASK_PRIORITIES = get_args(TaskPriority)


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class _View(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Inbound documents
# ---------------------------------------------------------------------------

class UserDocument(_Document):
    """Persisted user attributes, minus the password."""

    name: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=1, max_length=255, pattern=EMAIL_PATTERN)
    role: UserRole = "user"
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class NewUser(UserDocument):
    password: str


class TaskDocument(_Document):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: datetime
    assigned_to: str
    created_by: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("assigned_to", "created_by")
    @classmethod
    def check_reference(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        normalized = normalize_identifier(v)
        if normalized is None:
            raise ValueError("Invalid user reference")
        return normalized

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: List[str]) -> List[str]:
        for tag in v:
            if len(tag) > 20:
                raise ValueError("Tag cannot be more than 20 characters")
        return v


class CommentDocument(_Document):
    user: str
    text: str = Field(min_length=1, max_length=1000)

    @field_validator("user")
    @classmethod
    def check_user(cls, v: str) -> str:
        normalized = normalize_identifier(v)
        if normalized is None:
            raise ValueError("Invalid user reference")
        return normalized


# ---------------------------------------------------------------------------
# Outbound views
# ---------------------------------------------------------------------------

class UserView(_View):
    id: str
    name: str
    email: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserRef(_View):
    """Minimal projection used wherever a task points at a user."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class CommentAuthor(_View):
    id: str
    name: Optional[str] = None


class CommentView(_View):
    id: int
    user: CommentAuthor
    text: str
    created_at: datetime


class TaskView(_View):
    id: str
    title: str
    description: str
    status: str
    priority: str
    due_date: datetime
    assigned_to: UserRef
    created_by: UserRef
    tags: List[str]
    comments: List[CommentView] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    is_overdue: bool
    progress: int


class RoleCount(_View):
    role: str
    count: int


class UserStats(_View):
    total_users: int
    stats: List[RoleCount]
