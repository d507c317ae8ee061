"""Unit tests for taskboard.cli — command parsing and execution."""

from unittest.mock import patch

import pytest
from sqlalchemy import inspect

import taskboard.cli as cli_mod
from taskboard.db.session import Database
from taskboard.stores.tasks import TaskStore
from taskboard.stores.users import UserStore


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    """Keep CLI runs from installing a stderr handler at INFO."""
    monkeypatch.setattr("taskboard.engine.logging.configure_logging", lambda config=None: None)


class TestCLIParsing:
    """argparse setup."""

    def test_module_has_expected_commands(self):
        assert hasattr(cli_mod, "cmd_init_db")
        assert hasattr(cli_mod, "cmd_seed")
        assert hasattr(cli_mod, "cmd_serve")

    def test_no_command_prints_help(self, capsys):
        assert cli_mod.main([]) == 0
        assert "init-db" in capsys.readouterr().out

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            cli_mod.main(["explode"])

    def test_bad_config(self, tmp_path, capsys):
        bad = tmp_path / "taskboard.yaml"
        bad.write_text("environment: staging\n", encoding="utf-8")
        assert cli_mod.main(["--config", str(bad), "init-db"]) == 1
        assert "[ERROR]" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, capsys):
        missing = tmp_path / "absent.yaml"
        assert cli_mod.main(["--config", str(missing), "init-db"]) == 1
        assert "Config file not found" in capsys.readouterr().out


class TestInitDb:
    def test_creates_tables(self, db_url, capsys):
        assert cli_mod.main(["--database-url", db_url, "init-db"]) == 0
        assert "[OK] Database tables created" in capsys.readouterr().out
        with Database(db_url) as db:
            assert {"users", "tasks", "task_comments"} <= set(inspect(db.engine).get_table_names())


class TestSeed:
    """Demo dataset."""

    def test_seed(self, db_url, capsys):
        assert cli_mod.main(["--database-url", db_url, "seed"]) == 0
        out = capsys.readouterr().out
        assert "[OK] Created 3 users" in out
        assert "[OK] Created 4 tasks" in out

        with Database(db_url) as db:
            users = UserStore(db, bcrypt_rounds=4)
            tasks = TaskStore(db, users)

            stats = users.get_stats()
            assert stats.total_users == 3
            assert users.find_by_email("inactive@test.com").is_active is False
            admin = users.find_by_email("admin@test.com")
            assert admin.role == "admin"
            assert users.match_password(admin, "password123") is True

            items, total = tasks.list_tasks()
            assert total == 4
            by_title = {t.title: t for t in items}
            assert by_title["Write Documentation"].completed_at is not None
            assert by_title["Write Documentation"].is_overdue is False
            assert [c.text for c in by_title["Complete Testing Assignment"].comments] == [
                "Starting work on this task",
                "Great progress so far!",
            ]
            assert [t.title for t in tasks.find_overdue()] == ["Overdue Task"]

    def test_seed_twice_resets(self, db_url):
        assert cli_mod.main(["--database-url", db_url, "seed"]) == 0
        assert cli_mod.main(["--database-url", db_url, "seed"]) == 0
        with Database(db_url) as db:
            assert UserStore(db).get_stats().total_users == 3


class TestServe:
    def test_runs_uvicorn(self, db_url):
        with patch("uvicorn.run") as run:
            assert cli_mod.main(["--database-url", db_url, "serve", "--port", "8123"]) == 0
        run.assert_called_once()
        assert run.call_args.kwargs["port"] == 8123
        assert run.call_args.kwargs["host"] == "127.0.0.1"
