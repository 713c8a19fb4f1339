from __future__ import annotations

import pytest

from todolab.batch import BatchProcessor
from todolab.entity import Todo, TodoNotFoundError, TodoRepository
from todolab.memory import InMemoryTodoRepository
from todolab.notifier import Notifier
from todolab.stats_service import StatsService
from todolab.todo_service import TodoService
from todolab.web import create_app


class _PlainRepository(TodoRepository):
    """A backend without the optional StorageInfo capability."""

    def __init__(self) -> None:
        self._todos: dict[str, Todo] = {}

    def create(self, todo):
        todo.id = str(len(self._todos) + 1)
        self._todos[todo.id] = todo

    def find_by_id(self, todo_id):
        todo = self._todos.get(todo_id)
        return todo.copy() if todo else None

    def find_all(self):
        return [todo.copy() for todo in self._todos.values()]

    def update(self, todo):
        if todo.id not in self._todos:
            raise TodoNotFoundError()
        self._todos[todo.id] = todo

    def delete(self, todo_id):
        if todo_id not in self._todos:
            raise TodoNotFoundError()
        del self._todos[todo_id]

    def count(self):
        return len(self._todos)

    def count_completed(self):
        return sum(1 for todo in self._todos.values() if todo.completed)


def _client_for(repository):
    todo_service = TodoService(repository)
    stats_service = StatsService(repository)
    batch_processor = BatchProcessor(todo_service, 3, processing_delay=0)
    notifier = Notifier(todo_service, send_latency=0)
    app = create_app(todo_service, stats_service, batch_processor, notifier)
    return app.test_client(), notifier


@pytest.fixture
def client():
    test_client, notifier = _client_for(InMemoryTodoRepository())
    yield test_client
    notifier.stop()


@pytest.fixture
def plain_client():
    test_client, notifier = _client_for(_PlainRepository())
    yield test_client
    notifier.stop()


def _create(client, title="Learn Goroutines", priority=3):
    response = client.post(
        "/api/v1/todos",
        json={"title": title, "description": "Master concurrent programming", "priority": priority},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


def _toggle(client, todo_id):
    return client.open(f"/api/v1/todos/{todo_id}/toggle", method="PATCH")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "message": "Todo Concurrency Learning API"}


def test_create_returns_created_todo(client):
    response = client.post(
        "/api/v1/todos",
        json={"title": "Learn Goroutines", "description": "Master concurrent programming", "priority": 3},
    )
    body = response.get_json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["message"] == "Resource created successfully"
    assert body["data"]["id"] == "1"
    assert body["data"]["title"] == "Learn Goroutines"
    assert body["data"]["completed"] is False


def test_create_without_title_is_rejected(client):
    response = client.post("/api/v1/todos", json={"priority": 2})
    body = response.get_json()
    assert response.status_code == 400
    assert body["success"] is False
    assert "'required' tag" in body["error"]


def test_create_with_empty_body_is_rejected(client):
    response = client.post("/api/v1/todos", data=b"", content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["error"] == "EOF"


def test_create_with_malformed_json_is_rejected(client):
    response = client.post("/api/v1/todos", data=b"{not json", content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_list_returns_every_todo(client):
    _create(client, "Task 1")
    _create(client, "Task 2")
    response = client.get("/api/v1/todos")
    titles = sorted(todo["title"] for todo in response.get_json()["data"])
    assert response.status_code == 200
    assert titles == ["Task 1", "Task 2"]


def test_get_missing_todo_is_not_found(client):
    response = client.get("/api/v1/todos/42")
    assert response.status_code == 404
    assert response.get_json()["error"] == "todo not found"


def test_update_changes_only_given_fields(client):
    created = _create(client, "Task 1", priority=2)
    response = client.put(f"/api/v1/todos/{created['id']}", json={"title": "Task 2"})
    data = response.get_json()["data"]
    assert response.status_code == 200
    assert data["title"] == "Task 2"
    assert data["priority"] == 2


def test_update_with_priority_out_of_range_is_rejected(client):
    created = _create(client)
    response = client.put(f"/api/v1/todos/{created['id']}", json={"priority": 5})
    assert response.status_code == 400
    assert "'max' tag" in response.get_json()["error"]


def test_update_missing_todo_is_not_found(client):
    response = client.put("/api/v1/todos/99", json={"title": "Task 1"})
    assert response.status_code == 404


def test_delete_removes_todo(client):
    created = _create(client)
    response = client.delete(f"/api/v1/todos/{created['id']}")
    assert response.status_code == 200
    assert response.get_json()["message"] == "Todo deleted successfully"
    assert client.get(f"/api/v1/todos/{created['id']}").status_code == 404


def test_toggle_flips_completion(client):
    created = _create(client)
    first = _toggle(client, created["id"]).get_json()["data"]
    second = _toggle(client, created["id"]).get_json()["data"]
    assert first["completed"] is True
    assert second["completed"] is False


def test_notify_existing_todo_is_accepted(client):
    created = _create(client)
    response = client.post(
        f"/api/v1/todos/{created['id']}/notify",
        json={"message": "Don't forget this task!", "delay_seconds": 3},
    )
    body = response.get_json()
    assert response.status_code == 202
    assert body["message"] == "Notification queued"
    assert body["data"]["todo_id"] == created["id"]
    assert body["data"]["delay_seconds"] == 3
    assert body["data"]["explanation"] == "Notification will be sent in 3 seconds. Watch the console!"


def test_notify_unknown_todo_is_not_found(client):
    response = client.post("/api/v1/todos/77/notify", json={"message": "Don't forget!"})
    assert response.status_code == 404
    assert response.get_json()["error"] == "todo not found"


def test_notification_stats_report_running_worker(client):
    data = client.get("/api/v1/notifications/stats").get_json()["data"]
    assert data["worker_running"] is True
    assert data["total_failed"] == 0


def test_batch_creates_every_todo(client):
    payload = {
        "todos": [
            {"title": "Task 1", "description": "First task", "priority": 2},
            {"title": "Task 2", "description": "Second task", "priority": 1},
            {"title": "Task 3", "description": "Third task", "priority": 3},
        ]
    }
    response = client.post("/api/v1/todos/batch", json=payload)
    data = response.get_json()["data"]
    assert response.status_code == 200
    assert data["success_count"] == 3
    assert data["failure_count"] == 0
    assert len(client.get("/api/v1/todos").get_json()["data"]) == 3


def test_batch_reports_invalid_items(client):
    payload = {"todos": [{"title": "Task 1", "priority": 2}, {"title": "Task 2"}]}
    data = client.post("/api/v1/todos/batch", json=payload).get_json()["data"]
    assert data["success_count"] == 1
    assert data["failure_count"] == 1
    errors = [result["error"] for result in data["results"] if not result["success"]]
    assert errors == ["invalid todo data"]


def test_batch_with_no_todos_is_rejected(client):
    response = client.post("/api/v1/todos/batch", json={"todos": []})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_batch_v2_keeps_request_indices(client):
    payload = {"todos": [{"title": "Task 1", "priority": 2}, {"title": "Task 2", "priority": 1}]}
    data = client.post("/api/v1/todos/batch-v2", json=payload).get_json()["data"]
    assert data["success_count"] == 2
    assert sorted(result["index"] for result in data["results"]) == [0, 1]


def test_stats_count_todos(client):
    created = _create(client, "Task 1")
    _create(client, "Task 2")
    _toggle(client, created["id"])
    data = client.get("/api/v1/stats").get_json()["data"]
    assert data["total_todos"] == 2
    assert data["completed_todos"] == 1
    assert data["pending_todos"] == 1
    assert data["storage_type"] == "in-memory"


def test_detailed_stats_count_requests_by_type(client):
    created = _create(client)
    client.get(f"/api/v1/todos/{created['id']}")
    client.get("/api/v1/todos")
    data = client.get("/api/v1/stats/detailed").get_json()["data"]
    assert data["create_requests"] == 1
    assert data["read_requests"] == 2
    assert data["request_count"] == 3


def test_storage_stats_come_from_backend(client):
    _create(client)
    data = client.get("/api/v1/stats/storage").get_json()["data"]
    assert data["storage_type"] == "in-memory"
    assert data["total_todos"] == 1


def test_thread_count_is_positive(client):
    data = client.get("/api/v1/stats/goroutines").get_json()["data"]
    assert data["thread_count"] >= 1


def test_reset_clears_counters(client):
    _create(client)
    response = client.post("/api/v1/stats/reset")
    assert response.get_json()["message"] == "Statistics reset successfully"
    data = client.get("/api/v1/stats/detailed").get_json()["data"]
    assert data["request_count"] == 0
    assert data["create_requests"] == 0


@pytest.mark.parametrize(("backend", "storage_type"), [("memory", "in-memory"), ("cache", "cached")])
def test_switch_storage_reports_new_backend(client, backend, storage_type):
    response = client.post("/api/v1/admin/switch-storage", json={"backend": backend})
    body = response.get_json()
    assert response.status_code == 200
    assert body["message"] == "Storage backend demonstration"
    assert body["data"]["new_backend"] == backend
    assert body["data"]["storage_type"] == storage_type


def test_switch_storage_rejects_unknown_backend(client):
    response = client.post("/api/v1/admin/switch-storage", json={"backend": "disk"})
    assert response.status_code == 400
    assert "'oneof' tag" in response.get_json()["error"]


def test_storage_info_for_backend_with_stats(client):
    data = client.get("/api/v1/admin/storage-info").get_json()["data"]
    assert data["implements_storage_info"] is True
    assert data["storage_type"] == "in-memory"
    assert data["stats"]["storage_type"] == "in-memory"


def test_backend_without_storage_info(plain_client):
    info = plain_client.get("/api/v1/admin/storage-info").get_json()["data"]
    storage = plain_client.get("/api/v1/stats/storage").get_json()["data"]
    stats = plain_client.get("/api/v1/stats").get_json()["data"]
    assert info == {"implements_storage_info": False}
    assert storage == {"error": "storage does not provide statistics"}
    assert stats["storage_type"] == "unknown"