"""The todo entity and the storage contracts built around it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

_MIN_PRIORITY = 1
_MAX_PRIORITY = 3


def _now() -> datetime:
    return datetime.now().astimezone()


def _timestamp(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    text = moment.isoformat()
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


class TodoNotFoundError(LookupError):
    """Raised when a todo that must exist is missing from storage."""

    def __init__(self, message: str = "todo not found") -> None:
        super().__init__(message)


@dataclass
class Todo:
    """A task. Priority runs from 1 (low) to 3 (high)."""

    title: str = ""
    description: str = ""
    priority: int = 0
    completed: bool = False
    id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_valid(self) -> bool:
        """True when the todo has a title and a priority in range."""
        return bool(self.title) and _MIN_PRIORITY <= self.priority <= _MAX_PRIORITY

    def mark_complete(self) -> None:
        self.completed = True
        self.updated_at = _now()

    def mark_incomplete(self) -> None:
        self.completed = False
        self.updated_at = _now()

    def copy(self) -> Todo:
        """Return an independent copy of this todo."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation of the todo."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority,
            "created_at": _timestamp(self.created_at),
            "updated_at": _timestamp(self.updated_at),
        }


class TodoRepository(ABC):
    """Contract every todo storage backend fulfils."""

    @abstractmethod
    def create(self, todo: Todo) -> None:
        """Store a new todo, assigning its id and timestamps."""

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Todo | None:
        """Return a copy of the todo, or None when it does not exist."""

    @abstractmethod
    def find_all(self) -> list[Todo]:
        """Return copies of every stored todo."""

    @abstractmethod
    def update(self, todo: Todo) -> None:
        """Replace a stored todo; raise TodoNotFoundError if it is missing."""

    @abstractmethod
    def delete(self, todo_id: str) -> None:
        """Remove a todo; raise TodoNotFoundError if it is missing."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored todos."""

    @abstractmethod
    def count_completed(self) -> int:
        """Return the number of completed todos."""


class StorageInfo(ABC):
    """Optional capability: a backend that can describe itself."""

    @abstractmethod
    def storage_type(self) -> str:
        """Return the name of the storage backend."""

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return backend-specific statistics."""