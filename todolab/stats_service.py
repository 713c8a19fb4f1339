"""Thread-safe request statistics and todo counts."""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from typing import Any

from .dto import StatsResponse
from .entity import StorageInfo, TodoRepository

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN

_REQUEST_TYPES = ("create", "read", "update", "delete")


def _fraction(value: int, scale: int) -> str:
    whole, rest = divmod(value, scale)
    if not rest:
        return str(whole)
    width = len(str(scale)) - 1
    digits = str(rest).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"


def _format_duration(nanoseconds: int) -> str:
    """Render a duration the way the API reports elapsed times, e.g. 1.5s or 200ms."""
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    value = abs(nanoseconds)
    if value < _NS_PER_US:
        return f"{sign}{value}ns"
    if value < _NS_PER_MS:
        return f"{sign}{_fraction(value, _NS_PER_US)}µs"
    if value < _NS_PER_S:
        return f"{sign}{_fraction(value, _NS_PER_MS)}ms"
    hours, rest = divmod(value, _NS_PER_HOUR)
    minutes, rest = divmod(rest, _NS_PER_MIN)
    seconds = _fraction(rest, _NS_PER_S)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _rfc3339(moment: datetime) -> str:
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


def _memory_usage_mb() -> float:
    """Peak resident memory of the process in MB, or 0.0 where unavailable."""
    try:
        import resource
    except ImportError:
        return 0.0
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return peak / divisor


class StatsService:
    """Counts requests by type and reports todo and storage statistics."""

    def __init__(self, repository: TodoRepository) -> None:
        self._lock = threading.Lock()
        self._repository = repository
        self._request_count = 0
        self._total_response_ns = 0
        self._last_request_time = datetime.now().astimezone()
        self._by_type = dict.fromkeys(_REQUEST_TYPES, 0)

    def record_request(self, request_type: str, duration: float) -> None:
        """Record one request of the given type that took ``duration`` seconds."""
        with self._lock:
            self._request_count += 1
            self._total_response_ns += round(duration * _NS_PER_S)
            self._last_request_time = datetime.now().astimezone()
            if request_type in self._by_type:
                self._by_type[request_type] += 1

    def stats(self) -> StatsResponse:
        """Return todo counts, completion rate and storage type."""
        total = self._repository.count()
        completed = self._repository.count_completed()
        rate = completed / total * 100 if total > 0 else 0.0
        storage_type = "unknown"
        if isinstance(self._repository, StorageInfo):
            storage_type = self._repository.storage_type()
        return StatsResponse(
            total_todos=total,
            completed_todos=completed,
            pending_todos=total - completed,
            completion_rate=rate,
            active_threads=threading.active_count(),
            storage_type=storage_type,
        )

    def detailed_stats(self) -> dict[str, Any]:
        """Return request counters, average response time and process figures."""
        with self._lock:
            average = 0
            if self._request_count > 0:
                average = self._total_response_ns // self._request_count
            return {
                "request_count": self._request_count,
                "last_request_time": _rfc3339(self._last_request_time),
                "avg_response_time": _format_duration(average),
                "create_requests": self._by_type["create"],
                "read_requests": self._by_type["read"],
                "update_requests": self._by_type["update"],
                "delete_requests": self._by_type["delete"],
                "active_threads": threading.active_count(),
                "memory_alloc_mb": _memory_usage_mb(),
            }

    def storage_stats(self) -> dict[str, Any]:
        """Return the backend's own statistics when it provides any."""
        if isinstance(self._repository, StorageInfo):
            return self._repository.stats()
        return {"error": "storage does not provide statistics"}

    def reset(self) -> None:
        """Zero every counter and restart the last-request clock."""
        with self._lock:
            self._request_count = 0
            self._total_response_ns = 0
            self._by_type = dict.fromkeys(_REQUEST_TYPES, 0)
            self._last_request_time = datetime.now().astimezone()

    def increment_counter(self) -> int:
        """Add one to the request count and return the new value."""
        with self._lock:
            self._request_count += 1
            return self._request_count