"""
Tests for database.py - task documents, owner scoping, users.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import _owner_clause
from errors import DuplicateEmail


class TestTaskCRUD:
    """Tests for basic task create/read/update/delete operations."""

    def test_create_task_basic(self, task_store):
        """Create a task; the store assigns an id."""
        task = task_store.create_task({"title": "A", "description": "B"})

        assert task.id
        assert task.title == "A"
        assert task.description == "B"
        assert task.owner_id is None

    def test_create_then_list(self, task_store):
        """A created task is the only one listed, with the same fields."""
        created = task_store.create_task({"title": "A", "description": "B"})

        tasks = task_store.list_tasks()
        assert len(tasks) == 1
        assert tasks[0].id == created.id
        assert tasks[0].title == "A"
        assert tasks[0].description == "B"

    def test_ids_are_unique(self, task_store):
        ids = {task_store.create_task({"title": f"Task {i}"}).id for i in range(5)}
        assert len(ids) == 5

    def test_list_in_insertion_order(self, task_store):
        for title in ("first", "second", "third"):
            task_store.create_task({"title": title})

        assert [t.title for t in task_store.list_tasks()] == ["first", "second", "third"]

    def test_unknown_fields_kept(self, task_store):
        """Fields outside the known set are stored and returned verbatim."""
        created = task_store.create_task({"title": "A", "tags": ["home", "urgent"], "done": False})

        task = task_store.get_task(created.id)
        dumped = task.model_dump(by_alias=True)
        assert dumped["tags"] == ["home", "urgent"]
        assert dumped["done"] is False

    def test_unparseable_due_date_accepted(self, task_store):
        task = task_store.create_task({"title": "A", "dueDate": "someday"})
        assert task_store.get_task(task.id).due_date == "someday"

    def test_get_all_tasks_empty(self, task_store):
        assert task_store.list_tasks() == []

    def test_update_task_partial(self, task_store):
        """Update replaces only the named fields."""
        created = task_store.create_task({"title": "Old", "description": "Keep me", "priority": "Low"})

        updated = task_store.update_task(created.id, {"title": "New", "priority": "High"})

        assert updated.id == created.id
        assert updated.title == "New"
        assert updated.priority == "High"
        assert updated.description == "Keep me"

    def test_update_to_null(self, task_store):
        created = task_store.create_task({"title": "A", "category": "Work"})
        updated = task_store.update_task(created.id, {"category": None})
        assert updated.category is None

    def test_update_task_not_found(self, task_store):
        """Update nonexistent task returns None and creates nothing."""
        assert task_store.update_task("nonexistent", {"title": "New title"}) is None
        assert task_store.list_tasks() == []

    def test_delete_task(self, task_store):
        created = task_store.create_task({"title": "Delete me"})
        assert task_store.delete_task(created.id) is True
        assert task_store.list_tasks() == []

    def test_delete_twice(self, task_store):
        """Second delete of the same id is a no-op."""
        created = task_store.create_task({"title": "Delete me"})

        assert task_store.delete_task(created.id) is True
        assert task_store.delete_task(created.id) is False
        assert task_store.get_task(created.id) is None


class TestOwnerScoping:
    """Tasks are scoped by owner_id in every query when an owner is given."""

    def test_list_only_own_tasks(self, task_store):
        task_store.create_task({"title": "X's task"}, owner_id="user-x")
        task_store.create_task({"title": "Y's task"}, owner_id="user-y")

        tasks = task_store.list_tasks("user-y")
        assert [t.title for t in tasks] == ["Y's task"]
        assert tasks[0].owner_id == "user-y"

    def test_get_foreign_task_is_none(self, task_store):
        created = task_store.create_task({"title": "X's task"}, owner_id="user-x")
        assert task_store.get_task(created.id, "user-y") is None
        assert task_store.get_task(created.id, "user-x") is not None

    def test_update_foreign_task_looks_missing(self, task_store):
        created = task_store.create_task({"title": "X's task"}, owner_id="user-x")

        assert task_store.update_task(created.id, {"title": "hijacked"}, "user-y") is None
        assert task_store.get_task(created.id).title == "X's task"

    def test_delete_foreign_task_is_noop(self, task_store):
        created = task_store.create_task({"title": "X's task"}, owner_id="user-x")

        assert task_store.delete_task(created.id, "user-y") is False
        assert task_store.get_task(created.id, "user-x") is not None

    def test_no_owner_sees_everything(self, task_store):
        """Without an owner (auth disabled) queries are unscoped."""
        task_store.create_task({"title": "X's task"}, owner_id="user-x")
        task_store.create_task({"title": "shared"})

        assert len(task_store.list_tasks()) == 2

    def test_owner_list_keeps_insertion_order(self, task_store):
        for title in ("first", "other", "second", "third"):
            task_store.create_task({"title": title}, owner_id="user-y" if title == "other" else "user-x")

        assert [t.title for t in task_store.list_tasks("user-x")] == ["first", "second", "third"]


class TestUsers:
    def test_create_and_find_by_email(self, user_store):
        user = user_store.create_user("Ada", "ada@example.com", "hash")

        found = user_store.find_user_by_email("ada@example.com")
        assert found.id == user.id
        assert found.name == "Ada"
        assert found.password_hash == "hash"

    def test_find_unknown_email(self, user_store):
        assert user_store.find_user_by_email("nobody@example.com") is None

    def test_get_user(self, user_store):
        user = user_store.create_user("Ada", "ada@example.com", "hash")
        assert user_store.get_user(user.id).email == "ada@example.com"
        assert user_store.get_user("missing") is None

    def test_duplicate_email_rejected(self, user_store):
        user_store.create_user("Ada", "ada@example.com", "hash")

        with pytest.raises(DuplicateEmail):
            user_store.create_user("Other Ada", "ada@example.com", "hash2")


class TestOwnerClause:
    def test_unscoped(self):
        assert _owner_clause(None) == ("", ())
        assert _owner_clause(None, "WHERE") == ("", ())

    def test_scoped(self):
        assert _owner_clause("user-x") == (" AND owner_id = ?", ("user-x",))
        assert _owner_clause("user-x", "WHERE") == (" WHERE owner_id = ?", ("user-x",))
