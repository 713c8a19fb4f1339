"""Command that builds the todo API and serves it until interrupted."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from collections.abc import Sequence
from typing import Any

from flask import Flask

from .batch import BatchProcessor
from .memory import InMemoryTodoRepository
from .notifier import Notifier
from .stats_service import StatsService
from .todo_service import TodoService
from .web import create_app

_WORKERS = 3
_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 8080
_RULE = "=" * 70
NOTIFIER_KEY = "notifier"

log = logging.getLogger(__name__)

_BANNER = """
╔════════════════════════════════════════════════════════════════╗
║                                                                ║
║           TODO APP - Learning Concurrency & Interfaces        ║
║                                                                ║
║  📚 This app teaches:                                         ║
║     • Interfaces - Multiple implementations of same contract  ║
║     • Threads - Concurrent execution in the background        ║
║     • Queues - Communication between threads                  ║
║     • Locks - Thread-safe shared state                        ║
║                                                                ║
╚════════════════════════════════════════════════════════════════╝
"""

_ENDPOINT_SECTIONS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "📋 BASIC CRUD (Learn: Interfaces)",
        (
            "POST   /api/v1/todos              - Create todo",
            "GET    /api/v1/todos              - List all todos",
            "GET    /api/v1/todos/:id          - Get specific todo",
            "PUT    /api/v1/todos/:id          - Update todo",
            "DELETE /api/v1/todos/:id          - Delete todo",
            "PATCH  /api/v1/todos/:id/toggle   - Toggle completion",
        ),
    ),
    (
        "🔄 BATCH OPERATIONS (Learn: Threads + Queues)",
        (
            "POST   /api/v1/todos/batch        - Process batch (worker pool pattern)",
            "POST   /api/v1/todos/batch-v2     - Process batch (semaphore pattern)",
        ),
    ),
    (
        "📧 NOTIFICATIONS (Learn: Background Threads)",
        (
            "POST   /api/v1/todos/:id/notify   - Send async notification",
            "GET    /api/v1/notifications/stats - Notification statistics",
        ),
    ),
    (
        "📊 STATISTICS (Learn: Locks)",
        (
            "GET    /api/v1/stats               - Basic statistics",
            "GET    /api/v1/stats/detailed      - Detailed statistics",
            "GET    /api/v1/stats/storage       - Storage-specific stats",
            "GET    /api/v1/stats/goroutines    - Active thread count",
            "POST   /api/v1/stats/reset         - Reset statistics",
        ),
    ),
    (
        "⚙️  ADMIN (Learn: Interface Switching)",
        (
            "POST   /api/v1/admin/switch-storage - Switch storage backend",
            "GET    /api/v1/admin/storage-info   - Current storage info",
        ),
    ),
)

_EXAMPLES = (
    "💡 TRY THESE EXAMPLES:",
    "  # Create a todo",
    "  curl -X POST http://localhost:8080/api/v1/todos \\",
    '    -H "Content-Type: application/json" \\',
    """    -d '{"title":"Learn Go","description":"Master concurrency","priority":3}'""",
    "",
    "  # Batch create (watch console for worker activity!)",
    "  curl -X POST http://localhost:8080/api/v1/todos/batch \\",
    '    -H "Content-Type: application/json" \\',
    """    -d '{"todos":[{"title":"Task 1","priority":2},{"title":"Task 2","priority":1}]}'""",
    "",
    "  # Send async notification (returns immediately!)",
    "  curl -X POST http://localhost:8080/api/v1/todos/1/notify \\",
    '    -H "Content-Type: application/json" \\',
    """    -d '{"message":"Don't forget!","delay_seconds":5}'""",
    "",
    "  # View statistics",
    "  curl http://localhost:8080/api/v1/stats",
)


def build_app() -> Flask:
    """Wire an in-memory repository, the services and the routes into an app.

    The background notifier is kept in ``app.extensions["notifier"]`` so that
    whoever runs the app can stop it.
    """
    repository = InMemoryTodoRepository()
    log.info("✓ Repository initialized (in-memory)")

    todo_service = TodoService(repository)
    stats_service = StatsService(repository)
    batch_processor = BatchProcessor(todo_service, _WORKERS)
    notifier = Notifier(todo_service)
    log.info("✓ Services initialized")
    log.info("  - TodoService: Handles business logic")
    log.info("  - StatsService: Thread-safe statistics with a lock")
    log.info("  - BatchProcessor: Concurrent processing with worker pool")
    log.info("  - Notifier: Async notifications on a background thread")

    app = create_app(todo_service, stats_service, batch_processor, notifier)
    app.extensions[NOTIFIER_KEY] = notifier
    log.info("✓ Router configured")
    return app


def banner_text() -> str:
    """Return the start-up banner."""
    return _BANNER


def endpoints_text() -> str:
    """Return the list of endpoints and example requests shown at start-up."""
    lines = ["", _RULE, "                      AVAILABLE ENDPOINTS", _RULE]
    for title, endpoints in _ENDPOINT_SECTIONS:
        lines.append("")
        lines.append(title)
        lines.extend(f"  {endpoint}" for endpoint in endpoints)
    lines.append("")
    lines.extend(_EXAMPLES)
    lines.extend(["", _RULE, ""])
    return "\n".join(lines)


def _raise_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the API until Ctrl+C or SIGTERM, then stop the notifier."""
    parser = argparse.ArgumentParser(description="Todo API for learning concurrency.")
    parser.add_argument("--host", default=_DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=_DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    print(banner_text())

    app = build_app()
    notifier: Notifier = app.extensions[NOTIFIER_KEY]

    print(endpoints_text())
    log.info("🚀 Server starting on http://localhost:%d", args.port)
    log.info("Press Ctrl+C to stop")

    previous = None
    in_main_thread = threading.current_thread() is threading.main_thread()
    if in_main_thread:
        previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        app.run(host=args.host, port=args.port, threaded=True, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        if in_main_thread and previous is not None:
            signal.signal(signal.SIGTERM, previous)
        log.info("🛑 Shutdown signal received...")
        notifier.stop()

    log.info("✅ Server stopped gracefully")
    return 0