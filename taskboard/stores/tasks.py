"""
TaskStore — persistence and invariants for the Task entity.

Reference validation goes through UserStore.get_user(): the assigned user
(and an explicit creator) must exist when a task is written. The check and
the write run in separate sessions with no transaction around them, so a
user removed in between is not detected. Tasks are hard-deleted; their
comments go with them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from taskboard.core.derived import CLOSED_STATUSES, as_utc, is_overdue, progress_percent, utcnow
from taskboard.core.identifiers import normalize_identifier, parse_identifier
from taskboard.core.pagination import DEFAULT_LIMIT, MAX_LIMIT, PageRequest, page_request, task_filters
from taskboard.core.schemas import CommentAuthor, CommentView, TaskView, UserRef
from taskboard.core.validation import validate_comment, validate_status, validate_task_document
from taskboard.db.models import Task, TaskComment
from taskboard.db.session import Database
from taskboard.engine.config import TaskboardConfig
from taskboard.engine.errors import (
    AssignedUserNotFoundError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from taskboard.stores.result import StoreResult
from taskboard.stores.users import UserStore

logger = logging.getLogger("taskboard.stores.tasks")

TASK_NOT_FOUND = "Task not found"

# Inbound key -> model attribute for partial updates. createdBy is fixed at creation.
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "due_date": "due_date",
    "assignedTo": "assigned_to",
    "assigned_to": "assigned_to",
    "tags": "tags",
}


def _user_ref(user_id: str, user) -> UserRef:
    if user is None:
        return UserRef(id=user_id)
    return UserRef(id=user.id, name=user.name, email=user.email)


def to_task_view(task: Task, now: Optional[datetime] = None) -> TaskView:
    due_date = as_utc(task.due_date)
    return TaskView(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=due_date,
        assigned_to=_user_ref(task.assigned_to_id, task.assignee),
        created_by=_user_ref(task.created_by_id, task.creator),
        tags=list(task.tags or []),
        comments=[
            CommentView(
                id=c.id,
                user=CommentAuthor(id=c.user_id, name=c.author.name if c.author else None),
                text=c.text,
                created_at=as_utc(c.created_at),
            )
            for c in task.comments
        ],
        completed_at=as_utc(task.completed_at),
        created_at=as_utc(task.created_at),
        updated_at=as_utc(task.updated_at),
        is_overdue=is_overdue(due_date, task.status, now),
        progress=progress_percent(task.status),
    )


class TaskStore:
    """Create, read, update, delete and query tasks."""

    def __init__(
        self,
        database: Database,
        users: UserStore,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        self._db = database
        self._users = users
        self._default_limit = default_limit
        self._max_limit = max_limit

    @classmethod
    def from_config(cls, database: Database, users: UserStore, config: TaskboardConfig) -> "TaskStore":
        return cls(
            database,
            users,
            default_limit=config.pagination.default_limit,
            max_limit=config.pagination.max_limit,
        )

    def page_request(self, page: Any = None, page_size: Any = None) -> PageRequest:
        return page_request(page, page_size, self._default_limit, self._max_limit)

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _find(session: Session, task_id: Any) -> Tuple[Optional[Task], Optional[StoreResult]]:
        try:
            tid = parse_identifier(task_id, "task")
        except InvalidIdentifierError as exc:
            return None, StoreResult.failure(exc)
        task = session.get(Task, tid)
        if task is None:
            return None, StoreResult.failure(
                NotFoundError(TASK_NOT_FOUND, resource="task", resource_id=tid)
            )
        return task, None

    def _missing_assignee(self, raw_user_id: Any) -> Optional[StoreResult]:
        """Failure if *raw_user_id* is a well-formed id naming no user."""
        user_id = normalize_identifier(raw_user_id)
        if user_id is None:
            # Malformed or absent: reported by document validation instead
            return None
        if self._users.get_user(user_id).ok:
            return None
        return StoreResult.failure(AssignedUserNotFoundError(user_id=user_id))

    @staticmethod
    def _snapshot(task: Task) -> Dict[str, Any]:
        return {
            "title": task.title,
            "description": task.description,
            "status": task.status,
            "priority": task.priority,
            "due_date": as_utc(task.due_date),
            "assigned_to": task.assigned_to_id,
            "created_by": task.created_by_id,
            "tags": list(task.tags or []),
        }

    # -- reads --------------------------------------------------------------

    def list_tasks(
        self,
        page: Any = 1,
        page_size: Any = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[List[TaskView], int]:
        """
        Newest first. Filters (status, priority, assignedTo) are exact
        matches combined with AND. Returns (items, total_count).
        """
        req = self.page_request(page, page_size)
        criteria = task_filters(filters)

        conditions = []
        if "status" in criteria:
            conditions.append(Task.status == criteria["status"])
        if "priority" in criteria:
            conditions.append(Task.priority == criteria["priority"])
        if "assignedTo" in criteria:
            # A malformed id simply matches nothing
            assignee = normalize_identifier(criteria["assignedTo"]) or criteria["assignedTo"]
            conditions.append(Task.assigned_to_id == assignee)

        now = utcnow()
        with self._db.session_scope() as session:
            total = session.scalar(select(func.count()).select_from(Task).where(*conditions)) or 0
            rows = session.scalars(
                select(Task)
                .where(*conditions)
                .order_by(Task.created_at.desc(), Task.id.desc())
                .offset(req.offset)
                .limit(req.limit)
            ).all()
            logger.debug("Listed tasks filters=%s page=%s total=%s", criteria, req.page, total)
            return [to_task_view(t, now) for t in rows], total

    def get_task(self, task_id: Any) -> StoreResult[TaskView]:
        with self._db.session_scope() as session:
            task, failure = self._find(session, task_id)
            if failure is not None:
                return failure
            return StoreResult.success(to_task_view(task))

    def find_overdue(self, now: Optional[datetime] = None) -> List[TaskView]:
        """Tasks due strictly before *now* that are neither completed nor cancelled."""
        now = as_utc(now) or utcnow()
        with self._db.session_scope() as session:
            rows = session.scalars(
                select(Task)
                .where(Task.due_date < now, Task.status.not_in(CLOSED_STATUSES))
                .order_by(Task.due_date.asc())
            ).all()
            return [to_task_view(t, now) for t in rows]

    def find_by_user(self, user_id: Any) -> StoreResult[List[TaskView]]:
        """All tasks assigned to *user_id*."""
        try:
            uid = parse_identifier(user_id, "user")
        except InvalidIdentifierError as exc:
            return StoreResult.failure(exc)
        now = utcnow()
        with self._db.session_scope() as session:
            rows = session.scalars(
                select(Task)
                .where(Task.assigned_to_id == uid)
                .order_by(Task.created_at.desc(), Task.id.desc())
            ).all()
            return StoreResult.success([to_task_view(t, now) for t in rows])

    # -- writes -------------------------------------------------------------

    def create_task(self, data: Mapping[str, Any]) -> StoreResult[TaskView]:
        """
        Create a task. The assignee is resolved first; createdBy defaults to
        the assignee when not supplied.
        """
        missing = self._missing_assignee(data.get("assignedTo", data.get("assigned_to")))
        if missing is not None:
            return missing

        doc, violations = validate_task_document(data)
        if violations:
            return StoreResult.failure(ValidationError.from_violations(violations))

        created_by = doc.created_by or doc.assigned_to
        if created_by != doc.assigned_to and not self._users.get_user(created_by).ok:
            return StoreResult.failure(ValidationError.from_violations(
                [{"field": "createdBy", "message": "Creator user not found"}]
            ))

        with self._db.session_scope() as session:
            task = Task(
                title=doc.title,
                description=doc.description,
                status=doc.status,
                priority=doc.priority,
                due_date=doc.due_date,
                assigned_to_id=doc.assigned_to,
                created_by_id=created_by,
                tags=list(doc.tags),
                completed_at=utcnow() if doc.status == "completed" else None,
            )
            session.add(task)
            session.flush()
            logger.info("Created task %s assigned to %s", task.id, task.assigned_to_id)
            return StoreResult.success(to_task_view(task))

    def update_task(self, task_id: Any, data: Mapping[str, Any]) -> StoreResult[TaskView]:
        """
        Partial update. The merged document is re-validated in full, and a
        supplied assignee is re-resolved before anything is written.
        """
        with self._db.session_scope() as session:
            _, failure = self._find(session, task_id)
            if failure is not None:
                return failure

        requested_assignee = data.get("assignedTo", data.get("assigned_to"))
        if requested_assignee is not None:
            missing = self._missing_assignee(requested_assignee)
            if missing is not None:
                return missing

        with self._db.session_scope() as session:
            task, failure = self._find(session, task_id)
            if failure is not None:
                return failure

            merged = self._snapshot(task)
            for key, attr in UPDATABLE_FIELDS.items():
                if key in data and data[key] is not None:
                    merged[attr] = data[key]

            doc, violations = validate_task_document(merged)
            if violations:
                return StoreResult.failure(ValidationError.from_violations(violations))

            previous_status = task.status
            task.title = doc.title
            task.description = doc.description
            task.status = doc.status
            task.priority = doc.priority
            task.due_date = doc.due_date
            task.assigned_to_id = doc.assigned_to
            task.tags = list(doc.tags)
            if doc.status == "completed" and previous_status != "completed":
                task.completed_at = utcnow()

            session.flush()
            # Reload the viewonly user relationships for a changed assignee
            session.expire(task)
            logger.info("Updated task %s", task.id)
            return StoreResult.success(to_task_view(task))

    def delete_task(self, task_id: Any) -> StoreResult[Dict[str, Any]]:
        """Hard delete, comments included."""
        with self._db.session_scope() as session:
            task, failure = self._find(session, task_id)
            if failure is not None:
                return failure
            session.delete(task)
            logger.info("Deleted task %s", task.id)
            return StoreResult.success({})

    def add_comment(self, task_id: Any, user_id: Any, text: Any) -> StoreResult[TaskView]:
        """
        Append a comment. Only the shape of *user_id* is checked here;
        whether it names a real user is up to the caller.
        """
        with self._db.session_scope() as session:
            task, failure = self._find(session, task_id)
            if failure is not None:
                return failure

            doc, violations = validate_comment(user_id, text)
            if violations:
                return StoreResult.failure(ValidationError.from_violations(violations))

            task.comments.append(
                TaskComment(user_id=doc.user, text=doc.text, position=len(task.comments))
            )
            session.flush()
            logger.info("Comment added to task %s by %s", task.id, doc.user)
            return StoreResult.success(to_task_view(task))

    def set_status(self, task_id: Any, new_status: Any) -> StoreResult[TaskView]:
        """
        Any status may follow any other. Entering "completed" stamps
        completed_at; leaving it keeps the old stamp.
        """
        with self._db.session_scope() as session:
            task, failure = self._find(session, task_id)
            if failure is not None:
                return failure

            violations = validate_status(new_status)
            if violations:
                return StoreResult.failure(ValidationError.from_violations(violations))

            task.status = new_status
            if new_status == "completed":
                task.completed_at = utcnow()
            session.flush()
            logger.info("Task %s status -> %s", task.id, new_status)
            return StoreResult.success(to_task_view(task))
