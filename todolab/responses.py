"""JSON envelopes for successful and failed API responses."""

from __future__ import annotations

from typing import Any


def _plain(value: Any) -> Any:
    """Turn objects with a ``to_dict`` method, and containers of them, into plain data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def success_response(data: Any = None, message: str = "") -> dict[str, Any]:
    """Build a success envelope; absent data and empty messages are left out."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = _plain(data)
    if message:
        body["message"] = message
    return body


def error_response(message: str) -> dict[str, Any]:
    """Build an error envelope carrying the message."""
    return {"success": False, "error": message}