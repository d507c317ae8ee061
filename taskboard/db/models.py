"""
Taskboard Models — SQLAlchemy models for the taskboard database.

Tables:
1. users          — User accounts (soft-deleted via is_active)
2. tasks          — Work items assigned to users (hard-deleted)
3. task_comments  — Append-only comments owned by a task

User references held by tasks and comments are plain identifier columns.
Reference validation happens in the stores, not through database-level
foreign keys, so soft-deleted and historic users stay valid targets.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from taskboard.core.schemas import TASK_PRIORITIES, TASK_STATUSES, USER_ROLES
from taskboard.db.base import AuditMixin, Base, new_identifier, utcnow


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ---------------------------------------------------------------------------
# 1. Users
# ---------------------------------------------------------------------------

class User(Base, AuditMixin):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_identifier)
    name = Column(String(50), nullable=False)
    # Stored lower-cased; uniqueness is therefore case-insensitive.
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(10), default="user", nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(_in_list("role", USER_ROLES), name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


# ---------------------------------------------------------------------------
# 2. Tasks
# ---------------------------------------------------------------------------

class Task(Base, AuditMixin):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, default=new_identifier)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    priority = Column(String(10), default="medium", nullable=False, index=True)
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    assigned_to_id = Column(String(32), nullable=False)
    created_by_id = Column(String(32), nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    assignee = relationship(
        "User",
        primaryjoin="foreign(Task.assigned_to_id) == User.id",
        viewonly=True,
        lazy="selectin",
    )
    creator = relationship(
        "User",
        primaryjoin="foreign(Task.created_by_id) == User.id",
        viewonly=True,
        lazy="selectin",
    )
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            _in_list("status", TASK_STATUSES),
            name="ck_tasks_status",
        ),
        CheckConstraint(
            _in_list("priority", TASK_PRIORITIES),
            name="ck_tasks_priority",
        ),
        Index("idx_tasks_assigned_status", "assigned_to_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"


# ---------------------------------------------------------------------------
# 3. Task comments
# ---------------------------------------------------------------------------

class TaskComment(Base):
    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(
        String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(32), nullable=False)
    text = Column(Text, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    task = relationship("Task", back_populates="comments")
    author = relationship(
        "User",
        primaryjoin="foreign(TaskComment.user_id) == User.id",
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TaskComment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"
