"""
Task data model.

A task is stored as a small document ``{_id, title, date, createdAt,
completed}`` by either storage backend. This module holds the rules
every save must satisfy, the JSON serialization shared by both
backends, and the SQLAlchemy model that keeps a task document as a
table row.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from sqlalchemy.orm import validates

from eulist import db


class TaskValidationError(ValueError):
    """Raised when a task document violates the schema on save."""


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normalize datetimes to timezone-aware UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert datetime to an ISO-8601 UTC string.

    SQLite and pymongo (without ``tz_aware``) hand back naive values;
    those are UTC by construction.
    """
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def new_object_id() -> str:
    """Generate a fresh 24-hex-digit task identifier."""
    return str(ObjectId())


# -----------------------------------------------------------------------------
# Field Rules
# -----------------------------------------------------------------------------

def clean_title(value: Any) -> str:
    """
    Trim the title and reject anything that is not a non-empty string.

    Numbers and booleans are cast to their JSON text (``123`` becomes
    ``"123"``, ``true`` becomes ``"true"``); other non-strings are rejected.
    """
    if value is None:
        raise TaskValidationError("Task validation failed: title is required")
    if isinstance(value, bool):
        value = "true" if value else "false"
    elif isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise TaskValidationError("Task validation failed: title must be a string")
    title = value.strip()
    if not title:
        raise TaskValidationError("Task validation failed: title is required")
    return title


def clean_date(value: Any) -> datetime:
    """Require a datetime and normalize it to UTC."""
    if value is None:
        raise TaskValidationError("Task validation failed: date is required")
    if not isinstance(value, datetime):
        raise TaskValidationError("Task validation failed: date must be a datetime")
    return ensure_utc(value)


def clean_completed(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TaskValidationError("Task validation failed: completed must be a boolean")
    return value


FIELD_RULES: dict[str, Callable[[Any], Any]] = {
    "title": clean_title,
    "date": clean_date,
    "completed": clean_completed,
}


def clean_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a partial set of task fields, as applied by an update.

    Args:
        changes: Field name to new value. Only mutable fields are allowed.

    Returns:
        A new dictionary with every value cleaned.

    Raises:
        TaskValidationError: If a field is unknown or a value is invalid.
    """
    unknown = sorted(set(changes) - set(FIELD_RULES))
    if unknown:
        raise TaskValidationError(f"Task validation failed: cannot update {unknown}")
    return {name: FIELD_RULES[name](value) for name, value in changes.items()}


def new_task_document(title: Any, date: Any) -> dict[str, Any]:
    """Build the validated document for a task about to be created."""
    return {
        "title": clean_title(title),
        "date": clean_date(date),
        "createdAt": utcnow(),
        "completed": False,
    }


def serialize_task(document: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert a stored task document to its JSON representation.

    Args:
        document: Mapping with ``_id``, ``title``, ``date``, ``createdAt``
            and ``completed`` keys, as kept by either backend.

    Returns:
        Dictionary with the id as a string and timestamps as ISO strings.
    """
    return {
        "_id": str(document["_id"]),
        "title": document["title"],
        "date": to_utc_iso(document["date"]),
        "createdAt": to_utc_iso(document.get("createdAt")),
        "completed": bool(document.get("completed", False)),
    }


# -----------------------------------------------------------------------------
# SQLAlchemy Model
# -----------------------------------------------------------------------------

class Task(db.Model):
    """
    Task row for the SQL backend.

    Attributes:
        id: ObjectId-formatted string, assigned on insert.
        title: Trimmed, non-empty title.
        date: Due date.
        created_at: Timestamp when the task was created; never updated.
        completed: Completion flag.
    """

    __tablename__ = "tasks"
    __table_args__ = (db.Index("ix_tasks_date_created_at", "date", "created_at"),)

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    title = db.Column(db.String, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow
    )
    completed = db.Column(db.Boolean, nullable=False, default=False)

    @validates("title", "date", "completed")
    def _apply_field_rules(self, key: str, value: Any) -> Any:
        return FIELD_RULES[key](value)

    def to_document(self) -> dict[str, Any]:
        """Return the row in the shared document shape."""
        return {
            "_id": self.id,
            "title": self.title,
            "date": self.date,
            "createdAt": self.created_at,
            "completed": self.completed,
        }

    def to_dict(self) -> dict[str, Any]:
        return serialize_task(self.to_document())

    def __repr__(self) -> str:
        """Return string representation of the task."""
        return f"<Task {self.id}: {self.title}>"
