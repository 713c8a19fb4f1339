"""Bounded todo storage that tracks hit, miss and eviction statistics."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any

from .entity import StorageInfo, Todo, TodoNotFoundError, TodoRepository


def _age_key(item: tuple[str, Todo]) -> float:
    moment = item[1].updated_at
    return moment.timestamp() if moment is not None else float("-inf")


class CachedTodoRepository(TodoRepository, StorageInfo):
    """Keeps at most ``max_size`` todos, evicting the least recently updated."""

    def __init__(self, max_size: int) -> None:
        self._lock = threading.Lock()
        self._todos: dict[str, Todo] = {}
        self._next_id = 1
        self._max_size = max_size
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _evict_oldest(self) -> None:
        if self._todos:
            oldest_id, _ = min(self._todos.items(), key=_age_key)
            del self._todos[oldest_id]

    def create(self, todo: Todo) -> None:
        with self._lock:
            if len(self._todos) >= self._max_size:
                self._evict_oldest()
                self._evictions += 1
            todo.id = f"cache-{self._next_id}"
            self._next_id += 1
            now = datetime.now().astimezone()
            todo.created_at = now
            todo.updated_at = now
            self._todos[todo.id] = todo

    def find_by_id(self, todo_id: str) -> Todo | None:
        with self._lock:
            todo = self._todos.get(todo_id)
            if todo is None:
                self._misses += 1
                return None
            self._hits += 1
            return todo.copy()

    def find_all(self) -> list[Todo]:
        with self._lock:
            return [todo.copy() for todo in self._todos.values()]

    def update(self, todo: Todo) -> None:
        with self._lock:
            if todo.id not in self._todos:
                self._misses += 1
                raise TodoNotFoundError()
            self._hits += 1
            todo.updated_at = datetime.now().astimezone()
            self._todos[todo.id] = todo

    def delete(self, todo_id: str) -> None:
        with self._lock:
            if todo_id not in self._todos:
                self._misses += 1
                raise TodoNotFoundError()
            self._hits += 1
            del self._todos[todo_id]

    def count(self) -> int:
        with self._lock:
            return len(self._todos)

    def count_completed(self) -> int:
        with self._lock:
            return sum(1 for todo in self._todos.values() if todo.completed)

    def storage_type(self) -> str:
        return "cached"

    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total * 100 if total else 0.0
            return {
                "storage_type": "cached",
                "total_todos": len(self._todos),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": f"{hit_rate:.2f}%",
            }