"""
Request structures for the task endpoints.

JSON bodies are turned into frozen dataclasses before anything reaches
the store. Parsing raises ``RequestValidationError`` for input the API
answers with 400: missing required fields, dates that cannot be parsed
or are not in the future, and a non-boolean ``completed`` flag.

Fields that are absent or null in an update body count as not supplied;
so does an empty or zero ``date``, matching the presence check on create.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from eulist.models import ensure_utc, utcnow


class RequestValidationError(ValueError):
    """
    Raised when a request body fails validation.

    Attributes:
        error: Short summary placed in the envelope's ``error`` field.
        message: Human-readable detail placed in ``message``.
    """

    def __init__(self, error: str, message: str) -> None:
        super().__init__(message)
        self.error = error
        self.message = message


def parse_date(value: Any) -> datetime:
    """
    Parse an ISO-8601 string or an epoch timestamp in milliseconds.

    Args:
        value: ``YYYY-MM-DD``, a full ISO timestamp (a trailing ``Z`` is
            accepted; values without an offset are taken as UTC), or a
            number of milliseconds since the Unix epoch.

    Returns:
        Timezone-aware UTC datetime.

    Raises:
        RequestValidationError: If the value cannot be parsed.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise RequestValidationError(
                "Invalid date", f"Timestamp out of range: {value!r}"
            ) from None
    if not isinstance(value, str):
        raise RequestValidationError(
            "Invalid date", "Date must be an ISO-8601 string or epoch milliseconds"
        )
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise RequestValidationError(
            "Invalid date", f"Could not parse date: {value!r}"
        ) from None
    return ensure_utc(parsed)


def parse_future_date(value: Any, now: datetime | None = None) -> datetime:
    """Parse ``value`` and require it to be strictly later than ``now``."""
    parsed = parse_date(value)
    if parsed <= (now or utcnow()):
        raise RequestValidationError("Invalid date", "Date must be in the future")
    return parsed


@dataclass(frozen=True)
class CreateTaskRequest:
    """Body of ``POST /tasks``."""

    title: Any
    date: datetime

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> CreateTaskRequest:
        title = payload.get("title")
        raw_date = payload.get("date")
        # Trimming is left to the store's schema rules
        if not title or not raw_date:
            raise RequestValidationError("Incomplete data", "Title and date are required")
        return cls(title=title, date=parse_future_date(raw_date))


@dataclass(frozen=True)
class UpdateTaskRequest:
    """Body of ``PUT /tasks/<id>``; every field is optional."""

    title: Any = None
    date: datetime | None = None
    completed: bool | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> UpdateTaskRequest:
        raw_date = payload.get("date")
        completed = payload.get("completed")
        if completed is not None and not isinstance(completed, bool):
            raise RequestValidationError("Invalid data", "Completed must be a boolean")
        return cls(
            title=payload.get("title"),
            date=parse_future_date(raw_date) if raw_date else None,
            completed=completed,
        )

    def changes(self) -> dict[str, Any]:
        """Return only the supplied fields; ``completed=False`` is kept."""
        fields = {"title": self.title, "date": self.date, "completed": self.completed}
        return {name: value for name, value in fields.items() if value is not None}
