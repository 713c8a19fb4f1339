"""Asynchronous notifications delivered by a background worker thread."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .entity import Todo
from .todo_service import TodoService

_QUEUE_SIZE = 100
_SEND_LATENCY = 0.5
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class Notification:
    """A message about a todo, to be sent after ``delay`` seconds."""

    todo_id: str
    message: str
    delay: float = 0.0


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of sending one notification."""

    todo_id: str
    success: bool
    error: Exception | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now().astimezone())


class NotificationQueueFullError(RuntimeError):
    """Raised when a notification cannot be queued without waiting."""

    def __init__(self, message: str = "notification queue is full") -> None:
        super().__init__(message)


class Notifier:
    """Queues notifications and sends them from a background thread.

    ``send_latency`` is the simulated time, in seconds, that sending takes.
    """

    def __init__(
        self,
        todo_service: TodoService,
        queue_size: int = _QUEUE_SIZE,
        send_latency: float = _SEND_LATENCY,
    ) -> None:
        self.todo_service = todo_service
        self.send_latency = send_latency
        self._notifications: queue.Queue[Notification] = queue.Queue(maxsize=queue_size)
        self._results: queue.Queue[NotificationResult] = queue.Queue(maxsize=queue_size)
        self._lock = threading.Lock()
        self._total_sent = 0
        self._total_failed = 0
        self._running = True
        self._stopping = threading.Event()
        self._thread = threading.Thread(target=self._work, name="notifier", daemon=True)
        self._thread.start()

    def _work(self) -> None:
        print("🚀 Notification worker started")
        while not self._stopping.is_set():
            try:
                notification = self._notifications.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            self._process(notification)
        print("🛑 Notification worker stopped")
        with self._lock:
            self._running = False

    def _process(self, notification: Notification) -> None:
        if notification.delay > 0:
            print(
                f"⏰ Waiting {notification.delay:g}s before sending notification "
                f"for todo {notification.todo_id}..."
            )
            time.sleep(notification.delay)

        print(f"📧 Sending notification for todo {notification.todo_id}: {notification.message}")
        if self.send_latency > 0:
            time.sleep(self.send_latency)

        result = NotificationResult(todo_id=notification.todo_id, success=True)
        with self._lock:
            self._total_sent += 1
        try:
            self._results.put_nowait(result)
        except queue.Full:
            pass  # nobody is reading results; dropping is acceptable
        print(f"✅ Notification sent successfully for todo {notification.todo_id}")

    def send_async(self, todo_id: str, message: str, delay_seconds: int) -> None:
        """Queue a notification for an existing todo and return at once.

        Raises TodoNotFoundError for an unknown todo and
        NotificationQueueFullError when the queue has no room.
        """
        self.todo_service.get_by_id(todo_id)
        notification = Notification(todo_id=todo_id, message=message, delay=float(delay_seconds))
        try:
            self._notifications.put_nowait(notification)
        except queue.Full:
            raise NotificationQueueFullError() from None
        print(f"📬 Notification queued for todo {todo_id} (will send in {delay_seconds}s)")

    def stats(self) -> dict[str, Any]:
        """Return counters and the state of the queues and the worker."""
        with self._lock:
            return {
                "total_sent": self._total_sent,
                "total_failed": self._total_failed,
                "queue_length": self._notifications.qsize(),
                "results_pending": self._results.qsize(),
                "worker_running": self._running,
            }

    def stop(self) -> None:
        """Ask the worker to finish; it exits after the notification in hand."""
        self._stopping.set()

    def send_batch_async(self, todos: Iterable[Todo], message: str) -> None:
        """Queue the same message for many todos in parallel.

        Raises the first error any of them met.
        """
        errors: list[Exception] = []
        lock = threading.Lock()

        def send(todo: Todo) -> None:
            try:
                self.send_async(todo.id, message, 0)
            except Exception as exc:  # collected and re-raised below
                with lock:
                    errors.append(exc)

        threads = [threading.Thread(target=send, args=(todo,), daemon=True) for todo in todos]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        if errors:
            raise errors[0]

    def send_with_timeout(self, todo_id: str, message: str, timeout: float) -> None:
        """Queue a notification, waiting at most ``timeout`` seconds for room.

        Raises TimeoutError when the queue stays full.
        """
        notification = Notification(todo_id=todo_id, message=message, delay=0.0)
        try:
            self._notifications.put(notification, timeout=timeout)
        except queue.Full:
            raise TimeoutError("notification timed out: context deadline exceeded") from None