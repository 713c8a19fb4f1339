"""HTTP routes of the todo API, built as a Flask application."""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flask import Flask, request

from .batch import BatchProcessor
from .cache import CachedTodoRepository
from .dto import (
    BatchCreateRequest,
    CreateTodoRequest,
    NotifyRequest,
    RequestValidationError,
    SwitchStorageRequest,
    UpdateTodoRequest,
)
from .entity import StorageInfo, TodoNotFoundError, TodoRepository
from .memory import InMemoryTodoRepository
from .notifier import NotificationQueueFullError, Notifier
from .responses import error_response, success_response
from .stats_service import StatsService
from .todo_service import TodoService

_API = "/api/v1"
_RULE = "═" * 55
_CACHE_SIZE = 100

Reply = tuple[dict[str, Any], int]


def _read_json() -> Any:
    """Decode the request body; raise RequestValidationError when it is missing or malformed."""
    raw = request.get_data(cache=True)
    if not raw.strip():
        raise RequestValidationError("EOF")
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise RequestValidationError(str(exc)) from None


def _ok(data: Any) -> Reply:
    return success_response(data), 200


def _failure(message: str, status: int) -> Reply:
    return error_response(message), status


def create_app(
    todo_service: TodoService,
    stats_service: StatsService,
    batch_processor: BatchProcessor,
    notifier: Notifier,
) -> Flask:
    """Build the application with every route wired to the given services."""
    app = Flask(__name__)

    @app.errorhandler(RequestValidationError)
    def _bad_request(exc: RequestValidationError) -> Reply:
        return _failure(str(exc), 400)

    @contextmanager
    def timed(kind: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            stats_service.record_request(kind, time.perf_counter() - started)

    @app.get("/health")
    def health() -> Reply:
        return {"status": "ok", "message": "Todo Concurrency Learning API"}, 200

    # Todos

    @app.post(f"{_API}/todos")
    def create_todo() -> Reply:
        with timed("create"):
            body = CreateTodoRequest.from_dict(_read_json())
            try:
                todo = todo_service.create(body)
            except ValueError as exc:
                return _failure(str(exc), 500)
            return success_response(todo, "Resource created successfully"), 201

    @app.get(f"{_API}/todos")
    def list_todos() -> Reply:
        with timed("read"):
            return _ok(todo_service.get_all())

    @app.get(f"{_API}/todos/<todo_id>")
    def get_todo(todo_id: str) -> Reply:
        with timed("read"):
            try:
                return _ok(todo_service.get_by_id(todo_id))
            except TodoNotFoundError as exc:
                return _failure(str(exc), 404)

    @app.put(f"{_API}/todos/<todo_id>")
    def update_todo(todo_id: str) -> Reply:
        with timed("update"):
            body = UpdateTodoRequest.from_dict(_read_json())
            try:
                return _ok(todo_service.update(todo_id, body))
            except TodoNotFoundError as exc:
                return _failure(str(exc), 404)

    @app.delete(f"{_API}/todos/<todo_id>")
    def delete_todo(todo_id: str) -> Reply:
        with timed("delete"):
            try:
                todo_service.delete(todo_id)
            except TodoNotFoundError as exc:
                return _failure(str(exc), 404)
            return success_response(None, "Todo deleted successfully"), 200

    @app.route(f"{_API}/todos/<todo_id>/toggle", methods=["PATCH"])
    def toggle_todo(todo_id: str) -> Reply:
        with timed("update"):
            try:
                return _ok(todo_service.toggle_complete(todo_id))
            except TodoNotFoundError as exc:
                return _failure(str(exc), 404)

    # Notifications

    @app.post(f"{_API}/todos/<todo_id>/notify")
    def send_notification(todo_id: str) -> Reply:
        body = NotifyRequest.from_dict(_read_json())
        try:
            notifier.send_async(todo_id, body.message, body.delay_seconds)
        except (TodoNotFoundError, NotificationQueueFullError) as exc:
            return _failure(str(exc), 404)
        data = {
            "todo_id": todo_id,
            "message": "Notification queued successfully",
            "delay_seconds": body.delay_seconds,
            "explanation": (
                f"Notification will be sent in {body.delay_seconds} seconds. Watch the console!"
            ),
        }
        return success_response(data, "Notification queued"), 202

    @app.get(f"{_API}/notifications/stats")
    def notification_stats() -> Reply:
        return _ok(notifier.stats())

    # Batches

    @app.post(f"{_API}/todos/batch")
    def process_batch() -> Reply:
        body = BatchCreateRequest.from_dict(_read_json())
        if not body.todos:
            return _failure("at least one todo is required", 400)
        print(f"\n🚀 Starting batch processing of {len(body.todos)} todos...")
        print("Watch the console to see workers processing concurrently!")
        print(_RULE)
        result = batch_processor.process_batch(body)
        print(f"\n{_RULE}")
        print(
            f"✅ Batch complete! Success: {result.success_count}, "
            f"Failed: {result.failure_count}, Time: {result.time_elapsed}\n"
        )
        return _ok(result)

    @app.post(f"{_API}/todos/batch-v2")
    def process_batch_v2() -> Reply:
        body = BatchCreateRequest.from_dict(_read_json())
        print(
            f"\n🚀 Starting batch processing V2 (semaphore pattern) of {len(body.todos)} todos..."
        )
        result = batch_processor.process_batch_v2(body)
        print(
            f"✅ Batch V2 complete! Success: {result.success_count}, "
            f"Failed: {result.failure_count}, Time: {result.time_elapsed}\n"
        )
        return _ok(result)

    # Statistics

    @app.get(f"{_API}/stats")
    def stats() -> Reply:
        try:
            return _ok(stats_service.stats())
        except Exception as exc:  # reported to the client as a server error
            return _failure(str(exc), 500)

    @app.get(f"{_API}/stats/detailed")
    def detailed_stats() -> Reply:
        return _ok(stats_service.detailed_stats())

    @app.get(f"{_API}/stats/storage")
    def storage_stats() -> Reply:
        return _ok(stats_service.storage_stats())

    @app.get(f"{_API}/stats/goroutines")
    def thread_count() -> Reply:
        return _ok(
            {
                "thread_count": threading.active_count(),
                "explanation": (
                    "This shows how many threads are currently running. "
                    "Try the batch endpoint to see this number increase!"
                ),
            }
        )

    @app.post(f"{_API}/stats/reset")
    def reset_stats() -> Reply:
        stats_service.reset()
        return success_response(None, "Statistics reset successfully"), 200

    # Administration

    @app.post(f"{_API}/admin/switch-storage")
    def switch_storage() -> Reply:
        body = SwitchStorageRequest.from_dict(_read_json())
        new_repository: TodoRepository
        if body.backend == "memory":
            new_repository = InMemoryTodoRepository()
        elif body.backend == "cache":
            new_repository = CachedTodoRepository(_CACHE_SIZE)
        else:
            return _failure("unknown backend type", 400)
        storage_type = "unknown"
        if isinstance(new_repository, StorageInfo):
            storage_type = new_repository.storage_type()
        data = {
            "new_backend": body.backend,
            "storage_type": storage_type,
            "note": (
                "Storage backend created (educational example - "
                "not actually switched in running system)"
            ),
        }
        return success_response(data, "Storage backend demonstration"), 200

    @app.get(f"{_API}/admin/storage-info")
    def storage_info() -> Reply:
        repository = todo_service.repository
        info: dict[str, Any] = {"implements_storage_info": False}
        if isinstance(repository, StorageInfo):
            info["implements_storage_info"] = True
            info["storage_type"] = repository.storage_type()
            info["stats"] = repository.stats()
        return _ok(info)

    return app