"""User routes — /api/users."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from taskboard.api.deps import get_user_store
from taskboard.api.envelope import ok, ok_list
from taskboard.core.pagination import pagination_envelope
from taskboard.stores.users import UserStore

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def list_users(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    users: UserStore = Depends(get_user_store),
):
    req = users.page_request(page, limit)
    items, total = users.list_users(req.page, req.limit)
    return ok_list(items, pagination_envelope(req, total))


@router.post("", status_code=201)
def create_user(
    payload: Dict[str, Any] = Body(...),
    users: UserStore = Depends(get_user_store),
):
    return ok(users.create_user(payload).unwrap())


@router.get("/stats")
def user_stats(users: UserStore = Depends(get_user_store)):
    return ok(users.get_stats())


@router.get("/{user_id}")
def get_user(user_id: str, users: UserStore = Depends(get_user_store)):
    return ok(users.get_user(user_id).unwrap())


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    users: UserStore = Depends(get_user_store),
):
    return ok(users.update_user(user_id, payload).unwrap())


@router.delete("/{user_id}")
def delete_user(user_id: str, users: UserStore = Depends(get_user_store)):
    return ok(users.delete_user(user_id).unwrap())
