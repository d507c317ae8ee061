"""
Taskboard Database Base — SQLAlchemy declarative base and shared mixins.

Provides:
- Base: SQLAlchemy declarative base for all models
- AuditMixin: created_at, updated_at
- new_identifier(): opaque 32-char hex identifiers
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_identifier() -> str:
    """Return a fresh opaque identifier (UUID4 as 32 lowercase hex chars)."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all Taskboard models."""
    pass


class AuditMixin:
    """Adds created_at and updated_at columns."""
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
