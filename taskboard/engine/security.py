"""
Password hashing — bcrypt with a per-hash random salt.

Hashes are write-only from the application's point of view: nothing but
verify_password() ever reads them back.
"""

from __future__ import annotations

import logging

import bcrypt

from taskboard.engine.errors import PasswordComparisonError

logger = logging.getLogger("taskboard.engine.security")

DEFAULT_ROUNDS = 12

# bcrypt only reads the first 72 bytes; newer releases reject anything longer
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    bcrypt.checkpw compares in constant time. A mismatch returns False; a
    failure of the primitive itself (e.g. a corrupt stored hash) raises
    PasswordComparisonError so callers can tell the two apart. A candidate
    bcrypt could never have hashed (not a string, over 72 bytes) is
    simply a mismatch.
    """
    if not isinstance(password, str) or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        logger.error("Password comparison failed: %s", exc)
        raise PasswordComparisonError("Password comparison failed") from exc
