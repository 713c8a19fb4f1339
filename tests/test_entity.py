from datetime import datetime

import pytest

from todolab.entity import StorageInfo, Todo, TodoNotFoundError, TodoRepository


@pytest.mark.parametrize("priority", [1, 2, 3])
def test_valid_todo(priority):
    assert Todo(title="Write report", priority=priority).is_valid()


@pytest.mark.parametrize(
    "title, priority",
    [("", 2), ("Task", 0), ("Task", 4), ("Task", -1)],
)
def test_invalid_todo(title, priority):
    assert not Todo(title=title, priority=priority).is_valid()


def test_mark_complete_sets_flag_and_timestamp():
    todo = Todo(title="Task", priority=1)
    before = datetime.now().astimezone()
    todo.mark_complete()
    assert todo.completed
    assert todo.updated_at >= before


def test_mark_incomplete_clears_flag():
    todo = Todo(title="Task", priority=1, completed=True)
    todo.mark_incomplete()
    assert not todo.completed
    assert todo.updated_at is not None and todo.updated_at.tzinfo is not None


def test_copy_is_independent():
    original = Todo(title="Original", priority=2, id="7")
    duplicate = original.copy()
    assert duplicate == original
    duplicate.title = "Changed"
    assert original.title == "Original"


def test_to_dict_keys_and_values():
    moment = datetime.now().astimezone()
    todo = Todo(title="T", description="D", priority=3, id="5", created_at=moment)
    data = todo.to_dict()
    assert set(data) == {
        "id", "title", "description", "completed", "priority", "created_at", "updated_at",
    }
    assert data["title"] == "T"
    assert data["priority"] == 3
    assert data["updated_at"] is None
    assert datetime.fromisoformat(data["created_at"].replace("Z", "+00:00")) == moment


def test_repository_contracts_are_abstract():
    with pytest.raises(TypeError):
        TodoRepository()
    with pytest.raises(TypeError):
        StorageInfo()


def test_not_found_error_message():
    error = TodoNotFoundError()
    assert "todo not found" in str(error)
    assert isinstance(error, LookupError)