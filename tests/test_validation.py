"""Unit tests for taskboard.core.validation — pure document checks, no database."""

from datetime import datetime, timezone

import pytest

from taskboard.core.identifiers import normalize_identifier, parse_identifier
from taskboard.core.validation import (
    check_password,
    validate_comment,
    validate_new_user,
    validate_status,
    validate_task_document,
    validate_user_document,
)
from taskboard.db.base import new_identifier
from taskboard.engine.errors import InvalidIdentifierError


def _task(**overrides):
    data = {
        "title": "Write report",
        "description": "Quarterly numbers",
        "dueDate": "2030-01-15T12:00:00Z",
        "assignedTo": new_identifier(),
    }
    data.update(overrides)
    return data


def _messages(violations):
    return {v["field"]: v["message"] for v in violations}


class TestIdentifiers:
    """Identifier shape checks."""

    def test_new_identifier_shape(self):
        ident = new_identifier()
        assert len(ident) == 32
        assert ident == ident.lower()
        assert normalize_identifier(ident) == ident

    def test_dashed_uuid_normalized(self):
        ident = new_identifier()
        dashed = f"{ident[:8]}-{ident[8:12]}-{ident[12:16]}-{ident[16:20]}-{ident[20:]}"
        assert normalize_identifier(dashed.upper()) == ident

    @pytest.mark.parametrize("raw", ["", "abc", "12345", None, 42, "zz" * 16])
    def test_malformed(self, raw):
        assert normalize_identifier(raw) is None

    def test_parse_raises(self):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            parse_identifier("not-an-id", "task")
        assert exc_info.value.raw_value == "not-an-id"
        assert exc_info.value.status_code == 400


class TestUserValidation:
    """User documents."""

    def test_valid_new_user(self):
        user, violations = validate_new_user({
            "name": "  Ada  ", "email": "Ada@Example.COM", "password": "secret123",
        })
        assert violations == []
        assert user.name == "Ada"
        assert user.email == "ada@example.com"
        assert user.role == "user"
        assert user.is_active is True

    def test_all_violations_reported(self):
        user, violations = validate_new_user({})
        assert user is None
        assert _messages(violations) == {
            "name": "Please add a name",
            "email": "Please add an email",
            "password": "Please add a password",
        }

    def test_name_too_long(self):
        _, violations = validate_new_user({"name": "n" * 51, "email": "a@b.io", "password": "secret1"})
        assert _messages(violations) == {"name": "Name cannot be more than 50 characters"}

    @pytest.mark.parametrize("email", ["plain", "a@b", "a@b.c", "a b@c.io", "@c.io"])
    def test_bad_email(self, email):
        _, violations = validate_new_user({"name": "A", "email": email, "password": "secret1"})
        assert _messages(violations) == {"email": "Please add a valid email"}

    def test_short_password(self):
        _, violations = validate_new_user({"name": "A", "email": "a@b.io", "password": "12345"})
        assert _messages(violations) == {"password": "Password must be at least 6 characters"}

    def test_custom_password_length(self):
        _, violations = validate_new_user(
            {"name": "A", "email": "a@b.io", "password": "1234567"}, password_min_length=8
        )
        assert violations[0]["message"] == "Password must be at least 8 characters"

    def test_bad_role(self):
        _, violations = validate_new_user(
            {"name": "A", "email": "a@b.io", "password": "secret1", "role": "root"}
        )
        assert _messages(violations) == {"role": "Role must be one of: user, admin"}

    def test_camel_case_is_active(self):
        doc, violations = validate_user_document({"name": "A", "email": "a@b.io", "isActive": False})
        assert violations == []
        assert doc.is_active is False

    def test_none_counts_as_absent(self):
        doc, _ = validate_user_document({"name": "A", "email": "a@b.io", "role": None})
        assert doc.role == "user"

    def test_unknown_keys_ignored(self):
        doc, violations = validate_user_document({"name": "A", "email": "a@b.io", "extra": 1})
        assert violations == []

    def test_password_over_72_bytes(self):
        _, violations = validate_new_user({"name": "A", "email": "a@b.io", "password": "p" * 100})
        assert _messages(violations) == {"password": "Password cannot be more than 72 bytes"}

    def test_password_byte_length_not_char_length(self):
        # 30 characters but 90 bytes
        assert check_password("\u20ac" * 30)[0]["message"] == "Password cannot be more than 72 bytes"
        assert check_password("p" * 72) == []

    def test_check_password(self):
        assert check_password("secret") == []
        assert check_password(None)[0]["message"] == "Please add a password"
        assert check_password(123)[0]["field"] == "password"


class TestTaskValidation:
    """Task documents."""

    def test_valid_defaults(self):
        doc, violations = validate_task_document(_task())
        assert violations == []
        assert doc.status == "pending"
        assert doc.priority == "medium"
        assert doc.tags == []
        assert doc.created_by is None
        assert doc.due_date == datetime(2030, 1, 15, 12, tzinfo=timezone.utc)

    def test_title_101_chars(self):
        doc, violations = validate_task_document(_task(title="t" * 101))
        assert doc is None
        assert [v["field"] for v in violations] == ["title"]
        assert violations[0]["message"] == "Title cannot be more than 100 characters"

    def test_title_100_chars_ok(self):
        _, violations = validate_task_document(_task(title="t" * 100))
        assert violations == []

    def test_whitespace_title_is_missing(self):
        _, violations = validate_task_document(_task(title="   "))
        assert _messages(violations) == {"title": "Please add a task title"}

    def test_required_fields(self):
        _, violations = validate_task_document({})
        assert _messages(violations) == {
            "title": "Please add a task title",
            "description": "Please add a description",
            "dueDate": "Please add a due date",
            "assignedTo": "Please assign the task to a user",
        }

    def test_description_too_long(self):
        _, violations = validate_task_document(_task(description="d" * 501))
        assert _messages(violations) == {"description": "Description cannot be more than 500 characters"}

    def test_bad_enums(self):
        _, violations = validate_task_document(_task(status="done", priority="critical"))
        assert _messages(violations) == {
            "status": "Status must be one of: pending, in-progress, completed, cancelled",
            "priority": "Priority must be one of: low, medium, high, urgent",
        }

    def test_bad_due_date(self):
        _, violations = validate_task_document(_task(dueDate="next tuesday"))
        assert _messages(violations) == {"dueDate": "Due date must be a valid date"}

    def test_naive_due_date_is_utc(self):
        doc, _ = validate_task_document(_task(dueDate=datetime(2030, 1, 1, 9, 30)))
        assert doc.due_date.tzinfo == timezone.utc

    def test_malformed_assignee(self):
        _, violations = validate_task_document(_task(assignedTo="nope"))
        assert _messages(violations) == {"assignedTo": "Invalid user reference"}

    def test_malformed_creator(self):
        _, violations = validate_task_document(_task(createdBy="nope"))
        assert _messages(violations) == {"createdBy": "Invalid user reference"}

    def test_long_tag(self):
        _, violations = validate_task_document(_task(tags=["ok", "x" * 21]))
        assert _messages(violations) == {"tags": "Tag cannot be more than 20 characters"}

    def test_tags_trimmed(self):
        doc, _ = validate_task_document(_task(tags=["  urgent "]))
        assert doc.tags == ["urgent"]


class TestCommentAndStatus:
    """Comments and bare status values."""

    def test_valid_comment(self):
        user_id = new_identifier()
        doc, violations = validate_comment(user_id, "  hello ")
        assert violations == []
        assert doc.user == user_id
        assert doc.text == "hello"

    def test_comment_violations(self):
        _, violations = validate_comment("bad", "")
        assert _messages(violations) == {
            "user": "Invalid user reference",
            "text": "Please add comment text",
        }

    def test_comment_too_long(self):
        _, violations = validate_comment(new_identifier(), "c" * 1001)
        assert _messages(violations) == {"text": "Comment cannot be more than 1000 characters"}

    @pytest.mark.parametrize("status", ["pending", "in-progress", "completed", "cancelled"])
    def test_valid_status(self, status):
        assert validate_status(status) == []

    @pytest.mark.parametrize("status", ["done", "", None, "Completed"])
    def test_invalid_status(self, status):
        assert validate_status(status)[0]["field"] == "status"
