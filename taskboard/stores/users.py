"""
UserStore — persistence and invariants for the User entity.

- Passwords are bcrypt-hashed before they are written and never leave the
  store: every read path returns a UserView, which has no password field.
- Emails are stored lower-cased, so the unique index is case-insensitive.
- Deleting a user is a soft delete (is_active=False); tasks that reference
  the user are left untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.core.derived import as_utc, utcnow
from taskboard.core.identifiers import parse_identifier
from taskboard.core.pagination import DEFAULT_LIMIT, MAX_LIMIT, PageRequest, page_request
from taskboard.core.schemas import RoleCount, UserStats, UserView
from taskboard.core.validation import check_password, validate_new_user, validate_user_document
from taskboard.db.models import User
from taskboard.db.session import Database
from taskboard.engine.config import TaskboardConfig
from taskboard.engine.errors import (
    DuplicateEmailError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from taskboard.engine.security import DEFAULT_ROUNDS, hash_password, verify_password
from taskboard.stores.result import StoreResult

logger = logging.getLogger("taskboard.stores.users")

USER_NOT_FOUND = "User not found"
DUPLICATE_ON_CREATE = "User with this email already exists"
DUPLICATE_ON_UPDATE = "Email is already taken"

# Inbound key -> model attribute for partial updates
UPDATABLE_FIELDS = {
    "name": "name",
    "email": "email",
    "role": "role",
    "isActive": "is_active",
    "is_active": "is_active",
}


def to_user_view(user: User) -> UserView:
    return UserView(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        last_login=as_utc(user.last_login),
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


class UserStore:
    """Create, read, update, soft-delete and aggregate users."""

    def __init__(
        self,
        database: Database,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
        password_min_length: int = 6,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        self._db = database
        self._bcrypt_rounds = bcrypt_rounds
        self._password_min_length = password_min_length
        self._default_limit = default_limit
        self._max_limit = max_limit

    @classmethod
    def from_config(cls, database: Database, config: TaskboardConfig) -> "UserStore":
        return cls(
            database,
            bcrypt_rounds=config.security.bcrypt_rounds,
            password_min_length=config.security.password_min_length,
            default_limit=config.pagination.default_limit,
            max_limit=config.pagination.max_limit,
        )

    def page_request(self, page: Any = None, page_size: Any = None) -> PageRequest:
        return page_request(page, page_size, self._default_limit, self._max_limit)

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _find(session: Session, user_id: Any) -> Tuple[Optional[User], Optional[StoreResult]]:
        try:
            uid = parse_identifier(user_id, "user")
        except InvalidIdentifierError as exc:
            return None, StoreResult.failure(exc)
        user = session.get(User, uid)
        if user is None:
            return None, StoreResult.failure(
                NotFoundError(USER_NOT_FOUND, resource="user", resource_id=uid)
            )
        return user, None

    @staticmethod
    def _email_taken(session: Session, email: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(User.id).where(User.email == email.lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return session.execute(stmt.limit(1)).first() is not None

    # -- reads --------------------------------------------------------------

    def list_users(self, page: Any = 1, page_size: Any = None) -> Tuple[List[UserView], int]:
        """Newest first. Returns (items, total_count)."""
        req = self.page_request(page, page_size)
        with self._db.session_scope() as session:
            total = session.scalar(select(func.count()).select_from(User)) or 0
            rows = session.scalars(
                select(User)
                .order_by(User.created_at.desc(), User.id.desc())
                .offset(req.offset)
                .limit(req.limit)
            ).all()
            logger.debug("Listed users page=%s limit=%s total=%s", req.page, req.limit, total)
            return [to_user_view(u) for u in rows], total

    def get_user(self, user_id: Any) -> StoreResult[UserView]:
        with self._db.session_scope() as session:
            user, failure = self._find(session, user_id)
            if failure is not None:
                return failure
            return StoreResult.success(to_user_view(user))

    def find_by_email(self, email: str) -> Optional[UserView]:
        if not isinstance(email, str) or not email.strip():
            return None
        with self._db.session_scope() as session:
            user = session.scalars(
                select(User).where(User.email == email.strip().lower())
            ).first()
            return to_user_view(user) if user else None

    def get_stats(self) -> UserStats:
        """Total user count plus a count per role."""
        with self._db.session_scope() as session:
            total = session.scalar(select(func.count()).select_from(User)) or 0
            rows = session.execute(
                select(User.role, func.count()).group_by(User.role).order_by(User.role)
            ).all()
            return UserStats(
                total_users=total,
                stats=[RoleCount(role=role, count=count) for role, count in rows],
            )

    def match_password(self, user: Union[UserView, str], candidate: str) -> bool:
        """
        Compare *candidate* with the stored hash for *user*.

        Returns False for a wrong password, an unknown user or a candidate
        bcrypt cannot compare (not a string, or over 72 bytes). Raises
        PasswordComparisonError if bcrypt itself fails.
        """
        user_id = user.id if isinstance(user, UserView) else user
        with self._db.session_scope() as session:
            found, failure = self._find(session, user_id)
            if failure is not None:
                return False
            password_hash = found.password_hash
        return verify_password(candidate, password_hash)

    # -- writes -------------------------------------------------------------

    def create_user(self, data: Mapping[str, Any]) -> StoreResult[UserView]:
        doc, violations = validate_new_user(data, self._password_min_length)
        if violations:
            return StoreResult.failure(ValidationError.from_violations(violations))

        with self._db.session_scope() as session:
            if self._email_taken(session, doc.email):
                return StoreResult.failure(DuplicateEmailError(DUPLICATE_ON_CREATE, email=doc.email))

            user = User(
                name=doc.name,
                email=doc.email,
                password_hash=hash_password(doc.password, self._bcrypt_rounds),
                role=doc.role,
                is_active=doc.is_active,
            )
            session.add(user)
            try:
                session.flush()
            except IntegrityError:
                # Lost a race with a concurrent insert of the same email
                session.rollback()
                return StoreResult.failure(DuplicateEmailError(DUPLICATE_ON_CREATE, email=doc.email))

            logger.info("Created user %s (role: %s)", user.id, user.role)
            return StoreResult.success(to_user_view(user))

    def update_user(self, user_id: Any, data: Mapping[str, Any]) -> StoreResult[UserView]:
        """
        Partial update. Omitted fields keep their value; the password is
        re-hashed only when a non-empty one is supplied.
        """
        with self._db.session_scope() as session:
            user, failure = self._find(session, user_id)
            if failure is not None:
                return failure

            merged: Dict[str, Any] = {
                "name": user.name,
                "email": user.email,
                "role": user.role,
                "is_active": user.is_active,
            }
            for key, attr in UPDATABLE_FIELDS.items():
                if key in data and data[key] is not None:
                    merged[attr] = data[key]

            doc, violations = validate_user_document(merged)
            password = data.get("password")
            if password:
                violations = violations + check_password(password, self._password_min_length)
            if violations:
                return StoreResult.failure(ValidationError.from_violations(violations))

            if doc.email != user.email and self._email_taken(session, doc.email, exclude_id=user.id):
                return StoreResult.failure(DuplicateEmailError(DUPLICATE_ON_UPDATE, email=doc.email))

            user.name = doc.name
            user.email = doc.email
            user.role = doc.role
            user.is_active = doc.is_active
            if password:
                user.password_hash = hash_password(password, self._bcrypt_rounds)

            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                return StoreResult.failure(DuplicateEmailError(DUPLICATE_ON_UPDATE, email=doc.email))

            logger.info("Updated user %s", user.id)
            return StoreResult.success(to_user_view(user))

    def delete_user(self, user_id: Any) -> StoreResult[Dict[str, Any]]:
        """Soft delete. Repeating it on an inactive user is a no-op success."""
        with self._db.session_scope() as session:
            user, failure = self._find(session, user_id)
            if failure is not None:
                return failure
            if user.is_active:
                user.is_active = False
                logger.info("Soft-deleted user %s", user.id)
            return StoreResult.success({})

    def record_login(self, user_id: Any) -> StoreResult[UserView]:
        """Stamp last_login with the current time."""
        with self._db.session_scope() as session:
            user, failure = self._find(session, user_id)
            if failure is not None:
                return failure
            user.last_login = utcnow()
            session.flush()
            return StoreResult.success(to_user_view(user))
