"""Record identifiers — 32-char lowercase hex (UUID4)."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from taskboard.engine.errors import InvalidIdentifierError


def normalize_identifier(raw: Any) -> Optional[str]:
    """Return the canonical hex form of *raw*, or None if it is not an id."""
    if not isinstance(raw, str):
        return None
    try:
        return uuid.UUID(raw.strip()).hex
    except ValueError:
        return None


def parse_identifier(raw: Any, resource: str = "resource") -> str:
    """Canonical id for *raw*; raises InvalidIdentifierError when malformed."""
    normalized = normalize_identifier(raw)
    if normalized is None:
        raise InvalidIdentifierError(
            f"Invalid {resource} id: {raw!r}", raw_value=str(raw), resource=resource
        )
    return normalized
