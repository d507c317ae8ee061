"""Page/limit parsing, pagination envelopes and task list filters."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_PAGE = 1_000_000

# Largest OFFSET a 64-bit SQL integer can carry
_MAX_OFFSET = 2**63 - 1

TASK_FILTER_FIELDS = ("status", "priority", "assignedTo")


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def page_request(
    page: Any = None,
    limit: Any = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PageRequest:
    """
    Lenient page/limit parsing: unparseable or missing values fall back to
    page 1 / *default_limit*; both are clamped to at least 1, limit to at
    most *max_limit* and page to at most MAX_PAGE (or less, if the offset
    would not fit a 64-bit integer).
    """
    page_num = _to_int(page) or 1
    limit_num = min(max(_to_int(limit) or default_limit, 1), max_limit)
    page_cap = min(MAX_PAGE, _MAX_OFFSET // limit_num + 1)
    return PageRequest(
        page=min(max(page_num, 1), page_cap),
        limit=limit_num,
    )


def pagination_envelope(request: PageRequest, total: int) -> Dict[str, int]:
    return {
        "page": request.page,
        "limit": request.limit,
        "total": total,
        "pages": math.ceil(total / request.limit) if total else 0,
    }


def task_filters(raw: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Keep the recognised, non-empty task filters; everything else is dropped."""
    if not raw:
        return {}
    return {
        key: str(raw[key]).strip()
        for key in TASK_FILTER_FIELDS
        if raw.get(key) not in (None, "") and str(raw[key]).strip()
    }
