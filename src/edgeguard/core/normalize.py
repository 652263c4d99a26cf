"""Normalize arbitrary raised values into a ``NormalizedError``.

Remote call wrappers, the classifier and the generic handler all need the
same view of a failure: a non-empty message plus an optional ``code`` and
``status_code``. Callers raise exceptions, but backends also hand back plain
strings, response dicts (``{"error": ...}``) or nothing useful at all.

Examples:
    >>> normalize("Edge function quota exceeded").message
    'Edge function quota exceeded'
    >>> normalize({"error": "not found", "statusCode": 404})
    NormalizedError(message='not found', code=None, status_code=404)
    >>> normalize(None).message
    'An unexpected error occurred'
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

FALLBACK_MESSAGE = "An unexpected error occurred"

_STATUS_KEYS = ("status_code", "statusCode")


@dataclass(frozen=True)
class NormalizedError:
    """Canonical shape of any failure: ``message`` is never empty."""

    message: str
    code: str | None = None
    status_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"message": self.message}
        if self.code is not None:
            result["code"] = self.code
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


def _non_empty(message: Any) -> str:
    text = message if isinstance(message, str) else str(message)
    return text if text else FALLBACK_MESSAGE


def _as_code(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_status(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _first_attr(raw: Any, names: tuple[str, ...]) -> Any:
    for name in names:
        value = getattr(raw, name, None)
        if value is not None:
            return value
    return None


def _first_key(raw: Mapping, names: tuple[str, ...]) -> Any:
    for name in names:
        value = raw.get(name)
        if value is not None:
            return value
    return None


def extract_message(raw: Any) -> str:
    """Return the best message available in ``raw`` (never empty, never raises)."""
    if isinstance(raw, str):
        return _non_empty(raw)

    if isinstance(raw, BaseException):
        message = getattr(raw, "message", None)
        if isinstance(message, str) and message:
            return message
        return _non_empty(str(raw))

    if isinstance(raw, Mapping):
        if raw.get("message") is not None:
            return _non_empty(raw["message"])
        if raw.get("error") is not None:
            return _non_empty(raw["error"])
        try:
            return _non_empty(json.dumps(dict(raw), default=str))
        except (TypeError, ValueError):
            return FALLBACK_MESSAGE

    message = getattr(raw, "message", None)
    if isinstance(message, str) and message:
        return message

    return FALLBACK_MESSAGE


def normalize(raw: Any) -> NormalizedError:
    """Convert any raised/rejected value into a ``NormalizedError``.

    Strings become the message; exceptions contribute ``message`` plus any
    ``code``/``status_code`` attributes; mappings prefer ``message`` then
    ``error`` then their JSON form. Everything else falls back to
    ``FALLBACK_MESSAGE``.
    """
    message = extract_message(raw)

    if isinstance(raw, Mapping):
        return NormalizedError(
            message=message,
            code=_as_code(raw.get("code")),
            status_code=_as_status(_first_key(raw, _STATUS_KEYS)),
        )

    if isinstance(raw, (str, int, float)) or raw is None:
        return NormalizedError(message=message)

    return NormalizedError(
        message=message,
        code=_as_code(getattr(raw, "code", None)),
        status_code=_as_status(_first_attr(raw, _STATUS_KEYS)),
    )


def get_message(raw: Any) -> str:
    """Convenience accessor returning only the normalized message."""
    return normalize(raw).message


__all__ = [
    "FALLBACK_MESSAGE",
    "NormalizedError",
    "extract_message",
    "normalize",
    "get_message",
]
