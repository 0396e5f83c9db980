from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import current_app, jsonify


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are DateTime(timezone=False))."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_int_arg(raw: str | None, default: int, *, minimum: int = 1, maximum: int | None = None) -> int:
    """Parse a positive integer query arg; garbage or out-of-range values fall back to default."""
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    if value < minimum:
        return default
    if maximum is not None and value > maximum:
        return maximum
    return value


def parse_bool_arg(raw: str | None) -> bool | None:
    """'true' -> True, any other non-blank value -> False, blank/missing -> None (no filter)."""
    v = (raw or "").strip().lower()
    if not v:
        return None
    return v == "true"


def envelope(
    *,
    success: bool,
    message: str | None = None,
    data: Any = None,
    errors: list[dict[str, str]] | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    if error is not None:
        body["error"] = error
    return body


def api_ok(data: Any = None, *, message: str | None = None, status: int = 200):
    return jsonify(envelope(success=True, message=message, data=data)), status


def api_error(message: str, status: int, *, errors: list[dict[str, str]] | None = None, exc: BaseException | None = None):
    # Exception detail only leaks in development.
    detail = None
    if exc is not None and current_app.config.get("ENV") == "development":
        detail = str(exc)
    return jsonify(envelope(success=False, message=message, errors=errors, error=detail)), status
