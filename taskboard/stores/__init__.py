from taskboard.stores.result import StoreResult
from taskboard.stores.tasks import TaskStore
from taskboard.stores.users import UserStore

__all__ = ["StoreResult", "TaskStore", "UserStore"]
