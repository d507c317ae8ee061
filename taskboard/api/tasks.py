"""Task routes — /api/tasks."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from taskboard.api.deps import get_task_store
from taskboard.api.envelope import ok, ok_list
from taskboard.core.pagination import pagination_envelope
from taskboard.stores.tasks import TaskStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("")
def list_tasks(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assignedTo: Optional[str] = None,
    tasks: TaskStore = Depends(get_task_store),
):
    req = tasks.page_request(page, limit)
    filters = {"status": status, "priority": priority, "assignedTo": assignedTo}
    items, total = tasks.list_tasks(req.page, req.limit, filters)
    return ok_list(items, pagination_envelope(req, total))


@router.post("", status_code=201)
def create_task(
    payload: Dict[str, Any] = Body(...),
    tasks: TaskStore = Depends(get_task_store),
):
    return ok(tasks.create_task(payload).unwrap())


@router.get("/overdue")
def overdue_tasks(tasks: TaskStore = Depends(get_task_store)):
    return ok_list(tasks.find_overdue())


@router.get("/user/{user_id}")
def tasks_by_user(user_id: str, tasks: TaskStore = Depends(get_task_store)):
    return ok_list(tasks.find_by_user(user_id).unwrap())


@router.get("/{task_id}")
def get_task(task_id: str, tasks: TaskStore = Depends(get_task_store)):
    return ok(tasks.get_task(task_id).unwrap())


@router.put("/{task_id}")
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    tasks: TaskStore = Depends(get_task_store),
):
    return ok(tasks.update_task(task_id, payload).unwrap())


@router.delete("/{task_id}")
def delete_task(task_id: str, tasks: TaskStore = Depends(get_task_store)):
    return ok(tasks.delete_task(task_id).unwrap())


@router.post("/{task_id}/comments")
def add_comment(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    tasks: TaskStore = Depends(get_task_store),
):
    return ok(tasks.add_comment(task_id, payload.get("userId"), payload.get("text")).unwrap())


@router.patch("/{task_id}/status")
def update_status(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    tasks: TaskStore = Depends(get_task_store),
):
    return ok(tasks.set_status(task_id, payload.get("status")).unwrap())
