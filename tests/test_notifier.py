import time

import pytest

from todolab.dto import CreateTodoRequest
from todolab.entity import Todo, TodoNotFoundError
from todolab.memory import InMemoryTodoRepository
from todolab.notifier import NotificationQueueFullError, Notifier
from todolab.todo_service import TodoService


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def service():
    return TodoService(InMemoryTodoRepository())


@pytest.fixture
def notifier(service):
    instance = Notifier(service, send_latency=0)
    yield instance
    instance.stop()


def _todo(service, title="Learn"):
    return service.create(CreateTodoRequest(title=title, priority=2))


def _stopped_notifier(service, queue_size):
    instance = Notifier(service, queue_size=queue_size, send_latency=0)
    instance.stop()
    assert _wait_for(lambda: not instance.stats()["worker_running"])
    return instance


def test_unknown_todo_is_rejected(notifier):
    with pytest.raises(TodoNotFoundError):
        notifier.send_async("missing", "hello", 0)
    assert notifier.stats()["total_sent"] == 0


def test_notification_is_sent_in_background(notifier, service):
    todo = _todo(service)
    notifier.send_async(todo.id, "Don't forget!", 0)
    assert _wait_for(lambda: notifier.stats()["total_sent"] == 1)
    stats = notifier.stats()
    assert stats["results_pending"] == 1
    assert stats["queue_length"] == 0
    assert stats["total_failed"] == 0
    assert stats["worker_running"] is True


def test_stop_ends_worker(service):
    instance = _stopped_notifier(service, 5)
    assert instance.stats()["worker_running"] is False


def test_full_queue_raises(service):
    instance = _stopped_notifier(service, 1)
    todo = _todo(service)
    instance.send_async(todo.id, "first", 0)
    with pytest.raises(NotificationQueueFullError, match="notification queue is full"):
        instance.send_async(todo.id, "second", 0)
    assert instance.stats()["queue_length"] == 1


def test_send_with_timeout_times_out_on_full_queue(service):
    instance = _stopped_notifier(service, 1)
    instance.send_with_timeout("any", "first", 0.05)
    with pytest.raises(TimeoutError):
        instance.send_with_timeout("any", "second", 0.05)


def test_send_with_timeout_queues(notifier):
    notifier.send_with_timeout("no-check", "hi", 1.0)
    _wait_for(lambda: notifier.stats()["total_sent"] == 1)
    stats = notifier.stats()
    assert stats["total_sent"] == 1
    assert stats["queue_length"] == 0


def test_batch_sends_for_every_todo(notifier, service):
    todos = [_todo(service, f"t{n}") for n in range(4)]
    notifier.send_batch_async(todos, "batch")
    _wait_for(lambda: notifier.stats()["total_sent"] == len(todos))
    stats = notifier.stats()
    assert stats["total_sent"] == 4
    assert stats["total_failed"] == 0


def test_batch_reports_missing_todo(notifier, service):
    todos = [_todo(service), Todo(id="ghost", title="ghost", priority=1)]
    with pytest.raises(TodoNotFoundError):
        notifier.send_batch_async(todos, "batch")
    assert _wait_for(lambda: notifier.stats()["total_sent"] == 1)