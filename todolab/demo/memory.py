"""In-memory implementation of the demo storage contract, with statistics."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any

from .repository import NotFoundError, StorageInfo, Todo, TodoRepository

_ZERO_TIME = "0001-01-01T00:00:00Z"


def _rfc3339(moment: datetime | None) -> str:
    if moment is None:
        return _ZERO_TIME
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


class InMemoryTodoRepository(TodoRepository, StorageInfo):
    """Stores todos in a dictionary and counts every access."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._todos: dict[str, Todo] = {}
        self._access_count = 0
        self._last_access: datetime | None = None

    def _touch(self) -> None:
        self._access_count += 1
        self._last_access = datetime.now().astimezone()

    def create(self, todo: Todo) -> None:
        with self._lock:
            todo.created_at = datetime.now().astimezone()
            self._todos[todo.id] = todo
            self._touch()

    def find_by_id(self, todo_id: str) -> Todo:
        with self._lock:
            self._touch()
            try:
                return self._todos[todo_id]
            except KeyError:
                raise NotFoundError() from None

    def find_all(self) -> list[Todo]:
        with self._lock:
            self._touch()
            return list(self._todos.values())

    def update(self, todo: Todo) -> None:
        with self._lock:
            if todo.id not in self._todos:
                raise NotFoundError()
            self._todos[todo.id] = todo
            self._touch()

    def delete(self, todo_id: str) -> None:
        with self._lock:
            if todo_id not in self._todos:
                raise NotFoundError()
            del self._todos[todo_id]
            self._touch()

    def storage_type(self) -> str:
        return "in-memory"

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "storage_type": "in-memory",
                "total_todos": len(self._todos),
                "access_count": self._access_count,
                "last_access": _rfc3339(self._last_access),
            }