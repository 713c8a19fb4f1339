"""Todo storage kept in a JSON file, rewritten after every change."""

from __future__ import annotations

import json
import threading
from os import PathLike
from pathlib import Path

from .repository import NotFoundError, Todo, TodoRepository


class FileTodoRepository(TodoRepository):
    """Stores todos as a JSON object keyed by id.

    An existing file is loaded when the repository is created; a missing or
    unreadable file leaves it empty. Writes raise OSError when the file
    cannot be saved.
    """

    def __init__(self, file_path: str | PathLike[str]) -> None:
        self.file_path = Path(file_path)
        self._lock = threading.Lock()
        self._todos: dict[str, Todo] = {}
        self._load()

    def _load(self) -> None:
        try:
            raw = json.loads(self.file_path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                self._todos = {
                    key: Todo.from_dict(value)
                    for key, value in raw.items()
                    if isinstance(value, dict)
                }
        except (OSError, ValueError):
            pass

    def _save(self) -> None:
        document = {key: self._todos[key].to_dict() for key in sorted(self._todos)}
        self.file_path.write_text(
            json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def create(self, todo: Todo) -> None:
        with self._lock:
            self._todos[todo.id] = todo
            self._save()

    def find_by_id(self, todo_id: str) -> Todo:
        with self._lock:
            try:
                return self._todos[todo_id]
            except KeyError:
                raise NotFoundError() from None

    def find_all(self) -> list[Todo]:
        with self._lock:
            return list(self._todos.values())

    def update(self, todo: Todo) -> None:
        with self._lock:
            if todo.id not in self._todos:
                raise NotFoundError()
            self._todos[todo.id] = todo
            self._save()

    def delete(self, todo_id: str) -> None:
        with self._lock:
            if todo_id not in self._todos:
                raise NotFoundError()
            del self._todos[todo_id]
            self._save()