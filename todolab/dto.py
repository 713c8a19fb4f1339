"""Request and response shapes of the HTTP API, with request validation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable

_MIN_PRIORITY = 1
_MAX_PRIORITY = 3
_MAX_BATCH = 100
_MAX_DELAY_SECONDS = 300
_BACKENDS = ("memory", "cache")


class RequestValidationError(ValueError):
    """Raised when a request body cannot be decoded or fails validation."""


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda value: isinstance(value, str),
    "int": lambda value: isinstance(value, int) and not isinstance(value, bool),
    "bool": lambda value: isinstance(value, bool),
}


def _describe(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, float):
        return f"number {value}"
    if isinstance(value, int):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "null"


def _object(data: Any, type_name: str, field_path: str | None = None) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, dict):
        return data
    if field_path is None:
        target = f"Go value of type dto.{type_name}"
    else:
        target = f"Go struct field {field_path} of type dto.{type_name}"
    raise RequestValidationError(f"json: cannot unmarshal {_describe(data)} into {target}")


def _field(data: dict[str, Any], path: str, key: str, kind: str, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not _TYPE_CHECKS[kind](value):
        raise RequestValidationError(
            f"json: cannot unmarshal {_describe(value)} into Go struct field {path}.{key} of type {kind}"
        )
    return value


def _tag_error(struct: str, name: str, tag: str) -> str:
    return f"Key: '{struct}.{name}' Error:Field validation for '{name}' failed on the '{tag}' tag"


def _check(problems: list[str]) -> None:
    if problems:
        raise RequestValidationError("\n".join(problems))


def _range_tag(value: int, low: int, high: int) -> str | None:
    if value < low:
        return "min"
    if value > high:
        return "max"
    return None


@dataclass(frozen=True)
class CreateTodoRequest:
    """Data needed to create a todo."""

    title: str
    description: str = ""
    priority: int = 0

    @classmethod
    def _decode(cls, data: Any, path: str, field_path: str | None = None) -> CreateTodoRequest:
        fields = _object(data, "CreateTodoRequest", field_path)
        return cls(
            title=_field(fields, path, "title", "string", ""),
            description=_field(fields, path, "description", "string", ""),
            priority=_field(fields, path, "priority", "int", 0),
        )

    @classmethod
    def from_dict(cls, data: Any) -> CreateTodoRequest:
        struct = "CreateTodoRequest"
        request = cls._decode(data, struct)
        problems = []
        if not request.title:
            problems.append(_tag_error(struct, "Title", "required"))
        if request.priority == 0:
            problems.append(_tag_error(struct, "Priority", "required"))
        else:
            tag = _range_tag(request.priority, _MIN_PRIORITY, _MAX_PRIORITY)
            if tag:
                problems.append(_tag_error(struct, "Priority", tag))
        _check(problems)
        return request


@dataclass(frozen=True)
class UpdateTodoRequest:
    """Fields to change on a todo; empty strings and None leave a field alone."""

    title: str = ""
    description: str = ""
    priority: int = 0
    completed: bool | None = None

    @classmethod
    def from_dict(cls, data: Any) -> UpdateTodoRequest:
        struct = "UpdateTodoRequest"
        fields = _object(data, struct)
        request = cls(
            title=_field(fields, struct, "title", "string", ""),
            description=_field(fields, struct, "description", "string", ""),
            priority=_field(fields, struct, "priority", "int", 0),
            completed=_field(fields, struct, "completed", "bool", None),
        )
        tag = _range_tag(request.priority, _MIN_PRIORITY, _MAX_PRIORITY)
        _check([_tag_error(struct, "Priority", tag)] if tag else [])
        return request


@dataclass(frozen=True)
class BatchCreateRequest:
    """Several todos to create at once. Items are decoded but not validated here."""

    todos: tuple[CreateTodoRequest, ...]

    @classmethod
    def from_dict(cls, data: Any) -> BatchCreateRequest:
        struct = "BatchCreateRequest"
        fields = _object(data, struct)
        raw = fields.get("todos")
        if raw is None:
            _check([_tag_error(struct, "Todos", "required")])
        if not isinstance(raw, list):
            raise RequestValidationError(
                f"json: cannot unmarshal {_describe(raw)} into Go struct field "
                f"{struct}.todos of type []dto.CreateTodoRequest"
            )
        path = f"{struct}.todos"
        todos = tuple(CreateTodoRequest._decode(item, path, path) for item in raw)
        tag = _range_tag(len(todos), 1, _MAX_BATCH)
        _check([_tag_error(struct, "Todos", tag)] if tag else [])
        return cls(todos=todos)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of processing one item of a batch."""

    index: int = 0
    success: bool = False
    todo_id: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"index": self.index, "success": self.success}
        if self.todo_id:
            data["todo_id"] = self.todo_id
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class BatchCreateResponse:
    """Summary of a batch run."""

    success_count: int = 0
    failure_count: int = 0
    results: list[BatchResult] = field(default_factory=list)
    time_elapsed: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "results": [result.to_dict() for result in self.results],
            "time_elapsed": self.time_elapsed,
        }


@dataclass(frozen=True)
class NotifyRequest:
    """A notification to send about a todo after an optional delay."""

    message: str
    delay_seconds: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> NotifyRequest:
        struct = "NotifyRequest"
        fields = _object(data, struct)
        request = cls(
            message=_field(fields, struct, "message", "string", ""),
            delay_seconds=_field(fields, struct, "delay_seconds", "int", 0),
        )
        problems = []
        if not request.message:
            problems.append(_tag_error(struct, "Message", "required"))
        tag = _range_tag(request.delay_seconds, 0, _MAX_DELAY_SECONDS)
        if tag:
            problems.append(_tag_error(struct, "DelaySeconds", tag))
        _check(problems)
        return request


@dataclass
class StatsResponse:
    """System statistics."""

    total_todos: int = 0
    completed_todos: int = 0
    pending_todos: int = 0
    completion_rate: float = 0.0
    active_threads: int = 0
    storage_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SwitchStorageRequest:
    """Names a storage backend to create."""

    backend: str

    @classmethod
    def from_dict(cls, data: Any) -> SwitchStorageRequest:
        struct = "SwitchStorageRequest"
        fields = _object(data, struct)
        request = cls(backend=_field(fields, struct, "backend", "string", ""))
        if not request.backend:
            _check([_tag_error(struct, "Backend", "required")])
        if request.backend not in _BACKENDS:
            _check([_tag_error(struct, "Backend", "oneof")])
        return request