"""Demonstration of one contract with several storage backends and optional capabilities."""

from __future__ import annotations

import argparse
import logging
import tempfile
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from pathlib import Path

from ..stats_service import _format_duration
from .file_store import FileTodoRepository
from .memory import InMemoryTodoRepository
from .redis_store import RedisClient, RedisTodoRepository
from .repository import BatchCapable, CacheCapable, StorageInfo, Todo, TodoRepository

log = logging.getLogger(__name__)

DEFAULT_FILE = Path(tempfile.gettempdir()) / "todos.json"


def _duration_text(value: timedelta) -> str:
    return _format_duration((value // timedelta(microseconds=1)) * 1000)


def exercise_repository(name: str, repo: TodoRepository) -> None:
    """Create and read back a todo, then report the optional storage information."""
    print(f"--- Testing {name} Repository ---")
    todo = Todo(
        id=f"test-{name}",
        title=f"Test Todo from {name}",
        completed=False,
        created_at=datetime.now().astimezone(),
    )

    try:
        repo.create(todo)
    except Exception as exc:  # every backend failure is reported, not fatal
        log.error("Error creating todo: %s", exc)
    else:
        print("✓ Created todo")

    try:
        found = repo.find_by_id(todo.id)
    except Exception as exc:
        log.error("Error finding todo: %s", exc)
    else:
        print(f"✓ Found todo: {found.title}")

    if isinstance(repo, StorageInfo):
        print(f"✓ Storage type: {repo.storage_type()}")
        print(f"✓ Stats: {repo.stats()}")
    else:
        print("✗ StorageInfo not supported")


def bulk_import(repo: TodoRepository, todos: Iterable[Todo]) -> None:
    """Store todos with a batch operation when available, otherwise one by one."""
    todos = list(todos)
    if isinstance(repo, BatchCapable):
        print("✓ Using BatchCreate (efficient)")
        try:
            repo.batch_create(todos)
        except Exception as exc:
            log.error("Batch create failed: %s", exc)
        return

    print("✗ BatchCapable not supported, using loop (slower)")
    for todo in todos:
        try:
            repo.create(todo)
        except Exception as exc:
            log.error("Create failed: %s", exc)


def manage_cache(repo: TodoRepository) -> None:
    """Show the hit rate, clear the cache and check a TTL when the backend is a cache."""
    if isinstance(repo, CacheCapable):
        print("✓ Cache operations available")
        print(f"  - Hit rate: {repo.cache_hit_rate() * 100:.2f}%")
        try:
            repo.clear_cache()
        except Exception as exc:
            log.error("Clear cache failed: %s", exc)
        else:
            print("  - Cache cleared")
        try:
            remaining = repo.ttl("test-Redis")
        except Exception as exc:
            print(f"  - TTL check: {exc}")
        else:
            print(f"  - TTL: {_duration_text(remaining)}")
    else:
        print("✗ CacheCapable not supported")
    print()


def get_repository(storage_type: str) -> TodoRepository:
    """Return the backend named by configuration; anything unknown means memory."""
    if storage_type == "file":
        return FileTodoRepository(DEFAULT_FILE)
    return InMemoryTodoRepository()


def print_capabilities(repo: TodoRepository) -> None:
    """List which optional capabilities the repository offers."""
    print("Repository Capabilities:")
    print("  ✓ TodoRepository (required)")
    for capability, name in (
        (StorageInfo, "StorageInfo"),
        (BatchCapable, "BatchCapable"),
        (CacheCapable, "CacheCapable"),
    ):
        mark = "✓" if isinstance(repo, capability) else "✗"
        print(f"  {mark} {name} (optional)")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the demonstration against the memory, file and Redis backends."""
    parser = argparse.ArgumentParser(description="Storage backend demonstration.")
    parser.add_argument(
        "--file", type=Path, default=DEFAULT_FILE, help="JSON file for the file backend"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(format="%(asctime)s %(message)s")

    memory_repo = InMemoryTodoRepository()
    file_repo = FileTodoRepository(args.file)
    redis_repo = RedisTodoRepository(RedisClient())

    print("=== Testing Different Implementations ===")
    exercise_repository("Memory", memory_repo)
    print()
    exercise_repository("File", file_repo)
    print()
    exercise_repository("Redis", redis_repo)
    print()

    print("=== Bulk Import Demo ===")
    print()
    now = datetime.now().astimezone()
    todos = [
        Todo(id=f"bulk{number}", title=f"Todo {number}", completed=False, created_at=now)
        for number in range(1, 4)
    ]
    bulk_import(memory_repo, todos)
    bulk_import(file_repo, todos)
    print()

    print("=== Cache Management Demo ===")
    print()
    manage_cache(memory_repo)
    manage_cache(redis_repo)
    return 0