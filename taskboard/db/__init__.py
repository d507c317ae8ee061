from taskboard.db.base import AuditMixin, Base, new_identifier
from taskboard.db.models import Task, TaskComment, User
from taskboard.db.session import Database

__all__ = ["AuditMixin", "Base", "Database", "Task", "TaskComment", "User", "new_identifier"]
