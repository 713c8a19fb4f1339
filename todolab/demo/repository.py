"""A simplified todo and the required and optional storage contracts."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

_ZERO_TIME = "0001-01-01T00:00:00Z"
_TIME_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(.*)$")


def format_time(moment: datetime | None) -> str:
    """Render a timestamp as RFC 3339 with trailing zeros of the fraction removed."""
    if moment is None:
        return _ZERO_TIME
    if moment.tzinfo is None:
        moment = moment.astimezone()
    base = moment.isoformat(timespec="seconds")
    date_part, zone = base[:19], base[19:]
    if zone == "+00:00":
        zone = "Z"
    fraction = f"{moment.microsecond:06d}".rstrip("0")
    return f"{date_part}.{fraction}{zone}" if fraction else f"{date_part}{zone}"


def parse_time(text: str) -> datetime | None:
    """Parse an RFC 3339 timestamp; the zero time becomes None."""
    if text == _ZERO_TIME:
        return None
    match = _TIME_PATTERN.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    date_part, digits, zone = match.groups()
    if zone == "Z":
        zone = "+00:00"
    fraction = (digits or "")[:6].ljust(6, "0")
    return datetime.fromisoformat(f"{date_part}.{fraction}{zone}")


class NotFoundError(LookupError):
    """Raised when a todo is not in storage."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message)


@dataclass
class Todo:
    """A task with an id chosen by the caller."""

    id: str = ""
    title: str = ""
    completed: bool = False
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation of the todo."""
        return {
            "ID": self.id,
            "Title": self.title,
            "Completed": self.completed,
            "CreatedAt": format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Todo:
        """Build a todo from its JSON representation."""
        return cls(
            id=data.get("ID", ""),
            title=data.get("Title", ""),
            completed=bool(data.get("Completed", False)),
            created_at=parse_time(data.get("CreatedAt", _ZERO_TIME)),
        )


class TodoRepository(ABC):
    """Operations every storage backend must provide."""

    @abstractmethod
    def create(self, todo: Todo) -> None:
        """Store a todo under its id."""

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Todo:
        """Return the todo or raise NotFoundError."""

    @abstractmethod
    def find_all(self) -> list[Todo]:
        """Return every stored todo."""

    @abstractmethod
    def update(self, todo: Todo) -> None:
        """Replace a stored todo or raise NotFoundError."""

    @abstractmethod
    def delete(self, todo_id: str) -> None:
        """Remove a todo or raise NotFoundError."""


class StorageInfo(ABC):
    """Optional capability: a backend that can describe itself."""

    @abstractmethod
    def storage_type(self) -> str:
        """Return the name of the backend."""

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return backend-specific statistics."""


class BatchCapable(ABC):
    """Optional capability: creating and deleting many todos at once."""

    @abstractmethod
    def batch_create(self, todos: list[Todo]) -> None:
        """Store all the todos in one operation."""

    @abstractmethod
    def batch_delete(self, ids: list[str]) -> None:
        """Remove all the todos with these ids in one operation."""


class CacheCapable(ABC):
    """Optional capability: cache management."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop every cached todo and reset the statistics."""

    @abstractmethod
    def cache_hit_rate(self) -> float:
        """Return hits divided by lookups, 0.0 when there were none."""

    @abstractmethod
    def ttl(self, key: str) -> timedelta:
        """Return the time left before the entry expires."""