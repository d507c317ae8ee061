"""Uniform response envelope: {success, data?, error?, count?, pagination?}."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def ok(data: Any, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    body.update(extra)
    body["data"] = _dump(data)
    return body


def ok_list(items: List[Any], pagination: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    extra: Dict[str, Any] = {"count": len(items)}
    if pagination is not None:
        extra["pagination"] = pagination
    return ok(items, **extra)


def fail(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}
