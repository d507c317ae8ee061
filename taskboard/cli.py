"""
Taskboard CLI — database bootstrap, demo data and the API server.

Commands:
- taskboard init-db   — Create all tables
- taskboard seed      — Reset the database and load the demo users/tasks/comments
- taskboard serve     — Start the API under uvicorn
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from typing import Optional

from taskboard.engine.errors import ConfigError, TaskboardError

logger = logging.getLogger("taskboard.cli")

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"name": "Test Admin", "email": "admin@test.com", "role": "admin", "isActive": True},
    {"name": "Test User", "email": "user@test.com", "role": "user", "isActive": True},
    {"name": "Inactive User", "email": "inactive@test.com", "role": "user", "isActive": False},
]


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="Taskboard — users and tasks over REST",
    )
    parser.add_argument("--config", help="Path to taskboard.yaml (default: auto-discover)")
    parser.add_argument("--database-url", help="Override database.url from the config")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    seed_parser = subparsers.add_parser("seed", help="Load demo data (drops existing rows)")
    seed_parser.add_argument(
        "--password", default=DEMO_PASSWORD, help=f"Password for demo users (default: {DEMO_PASSWORD})"
    )

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"[ERROR] {e.message}")
        return 1

    from taskboard.engine.logging import configure_logging

    configure_logging(config.logging)

    if args.command == "init-db":
        return cmd_init_db(config)
    elif args.command == "seed":
        return cmd_seed(config, args.password)
    elif args.command == "serve":
        return cmd_serve(config, args)
    parser.print_help()
    return 0


def _load_config(args: argparse.Namespace):
    from taskboard.engine.config import load_config

    config = load_config(args.config)
    if args.database_url:
        config.database.url = args.database_url
    return config


def cmd_init_db(config) -> int:
    from taskboard.db.session import Database

    try:
        with Database.from_config(config.database) as db:
            db.create_all()
    except TaskboardError as e:
        print(f"[ERROR] Failed to create tables: {e.message}")
        return 1
    print("[OK] Database tables created")
    return 0


def cmd_seed(config, password: str) -> int:
    """
    Drop and recreate all tables, then load:
    3 users (admin, regular, inactive), 4 tasks (one completed and past due,
    one overdue) and 2 comments.
    """
    from taskboard.core.derived import utcnow
    from taskboard.db.session import Database
    from taskboard.stores.tasks import TaskStore
    from taskboard.stores.users import UserStore

    with Database.from_config(config.database) as db:
        db.drop_all()
        db.create_all()
        print("[OK] Cleared existing data")

        users = UserStore.from_config(db, config)
        tasks = TaskStore.from_config(db, users, config)

        try:
            created = [users.create_user({**u, "password": password}).unwrap() for u in DEMO_USERS]
            admin, regular = created[0], created[1]
            print(f"[OK] Created {len(created)} users")

            now = utcnow()
            demo_tasks = [
                {
                    "title": "Complete Testing Assignment",
                    "description": "Implement comprehensive testing for the task board",
                    "status": "in-progress",
                    "priority": "high",
                    "dueDate": now + timedelta(days=7),
                    "assignedTo": admin.id,
                    "tags": ["testing", "assignment", "important"],
                },
                {
                    "title": "Review Code Coverage",
                    "description": "Ensure 70% code coverage is achieved",
                    "status": "pending",
                    "priority": "medium",
                    "dueDate": now + timedelta(days=3),
                    "assignedTo": regular.id,
                    "createdBy": admin.id,
                    "tags": ["coverage", "review"],
                },
                {
                    "title": "Write Documentation",
                    "description": "Document testing strategies and debugging techniques",
                    "status": "completed",
                    "priority": "low",
                    "dueDate": now - timedelta(days=1),
                    "assignedTo": regular.id,
                    "createdBy": admin.id,
                    "tags": ["documentation", "completed"],
                },
                {
                    "title": "Overdue Task",
                    "description": "This task is overdue for testing purposes",
                    "status": "pending",
                    "priority": "urgent",
                    "dueDate": now - timedelta(days=2),
                    "assignedTo": admin.id,
                    "tags": ["overdue", "urgent"],
                },
            ]
            created_tasks = [tasks.create_task(t).unwrap() for t in demo_tasks]
            print(f"[OK] Created {len(created_tasks)} tasks")

            first = created_tasks[0]
            tasks.add_comment(first.id, admin.id, "Starting work on this task").unwrap()
            tasks.add_comment(first.id, regular.id, "Great progress so far!").unwrap()
            print("[OK] Added 2 comments")
        except TaskboardError as e:
            logger.error("Seeding failed: %s", e.to_json())
            print(f"[ERROR] Seeding failed: {e.message}")
            return 1

    print(f"  Admin user id:   {admin.id}")
    print(f"  Regular user id: {regular.id}")
    print(f"  Sample task id:  {first.id}")
    return 0


def cmd_serve(config, args: argparse.Namespace) -> int:
    import uvicorn

    from taskboard.api.app import create_app

    print(f"Starting Taskboard API on http://{args.host}:{args.port}")
    if args.reload:
        # Reload mode needs an import string; config is re-read by the child
        uvicorn.run("taskboard.api.app:create_app", factory=True,
                    host=args.host, port=args.port, reload=True)
    else:
        uvicorn.run(create_app(config=config), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
