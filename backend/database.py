import json
import logging
import os
import sqlite3
import subprocess
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from errors import DuplicateEmail
from models import Task, User

logger = logging.getLogger(__name__)


class Database:
    """A SQLite file holding the tasks and users collections."""

    def __init__(self, path: str):
        self.path = path

    @contextmanager
    def connect(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self):
        """Initialize database by running Alembic migrations."""
        # Run alembic upgrade from the backend directory
        backend_dir = os.path.dirname(os.path.abspath(__file__))
        subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=backend_dir,
            env={**os.environ, "TODO_DATABASE_PATH": os.path.abspath(self.path)},
            check=True
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_task(row) -> Task:
    """Convert a database row to a Task model."""
    document = json.loads(row["document"])
    return Task.model_validate({**document, "id": row["id"], "ownerId": row["owner_id"]})


def _owner_clause(owner_id: Optional[str], keyword: str = "AND") -> tuple[str, tuple]:
    # None means ownership is disabled: no scoping at all
    if owner_id is None:
        return "", ()
    return f" {keyword} owner_id = ?", (owner_id,)


class TaskStore:
    """
    Tasks stored as JSON documents.
    When owner_id is given, every query is scoped to that owner in SQL,
    so a foreign task looks exactly like a missing one.
    """

    def __init__(self, db: Database):
        self.db = db

    def list_tasks(self, owner_id: Optional[str] = None) -> list[Task]:
        clause, params = _owner_clause(owner_id, "WHERE")
        with self.db.connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM tasks{clause} ORDER BY rowid", params
            ).fetchall()
            return [_row_to_task(row) for row in rows]

    def get_task(self, task_id: str, owner_id: Optional[str] = None) -> Optional[Task]:
        clause, params = _owner_clause(owner_id)
        with self.db.connect() as conn:
            row = conn.execute(
                f"SELECT * FROM tasks WHERE id = ?{clause}", (task_id, *params)
            ).fetchone()
            if row:
                return _row_to_task(row)
        return None

    def create_task(self, fields: dict, owner_id: Optional[str] = None) -> Task:
        """Insert a new task document and return it with its assigned id."""
        task_id = str(uuid.uuid4())
        with self.db.connect() as conn:
            conn.execute(
                "INSERT INTO tasks (id, owner_id, document, created_at) VALUES (?, ?, ?, ?)",
                (task_id, owner_id, json.dumps(fields), _now())
            )
            conn.commit()

        logger.info("task event=created task_id=%s owner_id=%s", task_id, owner_id)
        return Task.model_validate({**fields, "id": task_id, "ownerId": owner_id})

    def update_task(self, task_id: str, fields: dict, owner_id: Optional[str] = None) -> Optional[Task]:
        """
        Replace the given fields on a task; other fields are left alone.
        Returns None if no task matches task_id (and owner_id).
        """
        clause, params = _owner_clause(owner_id)
        with self.db.connect() as conn:
            row = conn.execute(
                f"SELECT * FROM tasks WHERE id = ?{clause}", (task_id, *params)
            ).fetchone()
            if not row:
                return None

            document = json.loads(row["document"])
            document.update(fields)
            conn.execute(
                f"UPDATE tasks SET document = ? WHERE id = ?{clause}",
                (json.dumps(document), task_id, *params)
            )
            conn.commit()

            updated_row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()

        logger.info("task event=updated task_id=%s fields=%s", task_id, sorted(fields))
        return _row_to_task(updated_row)

    def delete_task(self, task_id: str, owner_id: Optional[str] = None) -> bool:
        """Delete a task. Returns whether a row was removed; a miss is not an error."""
        clause, params = _owner_clause(owner_id)
        with self.db.connect() as conn:
            cursor = conn.execute(f"DELETE FROM tasks WHERE id = ?{clause}", (task_id, *params))
            conn.commit()
            deleted = cursor.rowcount > 0

        logger.info("task event=deleted task_id=%s removed=%s", task_id, deleted)
        return deleted


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )


class UserStore:
    def __init__(self, db: Database):
        self.db = db

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=_now(),
        )
        with self.db.connect() as conn:
            try:
                conn.execute(
                    """INSERT INTO users (id, name, email, password_hash, created_at)
                       VALUES (?, ?, ?, ?, ?)""",
                    (user.id, user.name, user.email, user.password_hash, user.created_at)
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateEmail("Email already registered") from e
            conn.commit()
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self.db.connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
            if row:
                return _row_to_user(row)
        return None

    def get_user(self, user_id: str) -> Optional[User]:
        with self.db.connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if row:
                return _row_to_user(row)
        return None
