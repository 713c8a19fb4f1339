"""Business rules for todos, independent of the storage backend."""

from __future__ import annotations

from .dto import CreateTodoRequest, UpdateTodoRequest
from .entity import Todo, TodoNotFoundError, TodoRepository


class TodoService:
    """Creates, reads, changes and removes todos through any repository."""

    def __init__(self, repository: TodoRepository) -> None:
        self.repository = repository

    def create(self, request: CreateTodoRequest) -> Todo:
        """Build a todo from the request and store it.

        Raises ValueError when the todo would be invalid.
        """
        todo = Todo(
            title=request.title,
            description=request.description,
            priority=request.priority,
            completed=False,
        )
        if not todo.is_valid():
            raise ValueError("invalid todo data")
        self.repository.create(todo)
        return todo

    def get_by_id(self, todo_id: str) -> Todo:
        """Return the todo with this id or raise TodoNotFoundError."""
        todo = self.repository.find_by_id(todo_id)
        if todo is None:
            raise TodoNotFoundError()
        return todo

    def get_all(self) -> list[Todo]:
        return self.repository.find_all()

    def update(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        """Apply the fields the request provides and store the result."""
        todo = self.get_by_id(todo_id)
        if request.title:
            todo.title = request.title
        if request.description:
            todo.description = request.description
        if request.priority > 0:
            todo.priority = request.priority
        if request.completed is not None:
            todo.completed = request.completed
        self.repository.update(todo)
        return todo

    def delete(self, todo_id: str) -> None:
        self.repository.delete(todo_id)

    def toggle_complete(self, todo_id: str) -> Todo:
        """Flip the completion state of a todo and store it."""
        todo = self.get_by_id(todo_id)
        if todo.completed:
            todo.mark_incomplete()
        else:
            todo.mark_complete()
        self.repository.update(todo)
        return todo