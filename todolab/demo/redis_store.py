"""Todo storage on a simulated Redis client, with expiry and cache statistics."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .repository import CacheCapable, NotFoundError, StorageInfo, Todo, TodoRepository

_ENTRY_LIFETIME = timedelta(hours=24)
_PREFIX = "todo:"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RedisClient:
    """In-process stand-in for a Redis server: values, expiry times and hit counters."""

    data: dict[str, str] = field(default_factory=dict)
    ttl: dict[str, datetime] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0


class RedisTodoRepository(TodoRepository, StorageInfo, CacheCapable):
    """Stores each todo as JSON under ``todo:<id>`` with a 24 hour lifetime.

    ``clock`` returns the current time as an aware datetime.
    """

    def __init__(
        self, client: RedisClient, clock: Callable[[], datetime] = _utc_now
    ) -> None:
        self.client = client
        self.prefix = _PREFIX
        self._clock = clock

    def _key(self, todo_id: str) -> str:
        return self.prefix + todo_id

    def _is_todo_key(self, key: str) -> bool:
        return key.startswith(self.prefix)

    def _expired(self, key: str) -> bool:
        expiry = self.client.ttl.get(key)
        return expiry is None or self._clock() > expiry

    def _forget(self, key: str) -> None:
        self.client.data.pop(key, None)
        self.client.ttl.pop(key, None)

    def _store(self, key: str, todo: Todo) -> None:
        self.client.data[key] = json.dumps(
            todo.to_dict(), separators=(",", ":"), ensure_ascii=False
        )
        self.client.ttl[key] = self._clock() + _ENTRY_LIFETIME

    def create(self, todo: Todo) -> None:
        self._store(self._key(todo.id), todo)

    def find_by_id(self, todo_id: str) -> Todo:
        key = self._key(todo_id)
        data = self.client.data.get(key)
        if data is None:
            self.client.misses += 1
            raise NotFoundError()
        if self._expired(key):
            self._forget(key)
            self.client.misses += 1
            raise NotFoundError("expired")
        self.client.hits += 1
        return Todo.from_dict(json.loads(data))

    def find_all(self) -> list[Todo]:
        todos = []
        for key, data in list(self.client.data.items()):
            if not self._is_todo_key(key):
                continue
            if self._expired(key):
                self._forget(key)
                continue
            try:
                raw = json.loads(data)
                if not isinstance(raw, dict):
                    continue
                todos.append(Todo.from_dict(raw))
            except ValueError:
                continue
        return todos

    def update(self, todo: Todo) -> None:
        key = self._key(todo.id)
        if key not in self.client.data:
            raise NotFoundError()
        self._store(key, todo)

    def delete(self, todo_id: str) -> None:
        key = self._key(todo_id)
        if key not in self.client.data:
            raise NotFoundError()
        self._forget(key)

    def storage_type(self) -> str:
        return "redis-cache"

    def stats(self) -> dict[str, Any]:
        return {
            "storage_type": "redis-cache",
            "total_todos": sum(1 for key in self.client.data if self._is_todo_key(key)),
            "cache_hits": self.client.hits,
            "cache_misses": self.client.misses,
            "cache_hit_rate": self.cache_hit_rate(),
        }

    def clear_cache(self) -> None:
        for key in [key for key in self.client.data if self._is_todo_key(key)]:
            self._forget(key)
        self.client.hits = 0
        self.client.misses = 0

    def cache_hit_rate(self) -> float:
        total = self.client.hits + self.client.misses
        if total == 0:
            return 0.0
        return self.client.hits / total

    def ttl(self, key: str) -> timedelta:
        """Return the time left for the todo with this id.

        Raises NotFoundError when there is no entry or it has expired.
        """
        expiry = self.client.ttl.get(self._key(key))
        if expiry is None:
            raise NotFoundError("key not found")
        remaining = expiry - self._clock()
        if remaining < timedelta(0):
            raise NotFoundError("key expired")
        return remaining