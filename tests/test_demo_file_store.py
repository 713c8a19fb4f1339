import json
from datetime import datetime, timezone

import pytest

from todolab.demo.file_store import FileTodoRepository
from todolab.demo.repository import NotFoundError, StorageInfo, Todo


@pytest.fixture
def path(tmp_path):
    return tmp_path / "todos.json"


def test_missing_file_starts_empty(path):
    repo = FileTodoRepository(path)
    assert repo.find_all() == []
    assert not path.exists()


def test_create_writes_the_file(path):
    repo = FileTodoRepository(path)
    todo = Todo(id="a", title="Write", created_at=datetime(2024, 1, 2, tzinfo=timezone.utc))
    repo.create(todo)
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": todo.to_dict()}


def test_todos_survive_reloading(path):
    first = FileTodoRepository(path)
    todo = Todo(id="a", title="Write", completed=True,
                created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    first.create(todo)
    second = FileTodoRepository(path)
    assert second.find_by_id("a") == todo


def test_update_and_delete_are_persisted(path):
    repo = FileTodoRepository(path)
    repo.create(Todo(id="a", title="old"))
    repo.create(Todo(id="b"))
    repo.update(Todo(id="a", title="new"))
    repo.delete("b")
    reloaded = FileTodoRepository(path)
    assert [todo.title for todo in reloaded.find_all()] == ["new"]


def test_missing_ids_raise(path):
    repo = FileTodoRepository(path)
    with pytest.raises(NotFoundError):
        repo.find_by_id("x")
    with pytest.raises(NotFoundError):
        repo.update(Todo(id="x"))
    with pytest.raises(NotFoundError):
        repo.delete("x")


def test_unreadable_file_is_ignored(path):
    path.write_text("not json", encoding="utf-8")
    repo = FileTodoRepository(path)
    assert repo.find_all() == []


def test_file_store_has_no_storage_info(path):
    repo = FileTodoRepository(path)
    repo.create(Todo(id="a", title="Write"))
    assert repo.find_by_id("a").title == "Write"
    assert not isinstance(repo, StorageInfo)
    assert not hasattr(repo, "storage_type")
    assert not hasattr(repo, "stats")