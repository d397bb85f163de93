"""
Task storage backends.

The router talks to a ``TaskStore``: an object that owns the storage
connection and performs one single-document operation per call. Two
implementations are provided:

- ``MongoTaskStore`` keeps tasks in a MongoDB ``tasks`` collection.
- ``SqlTaskStore`` keeps the same documents in a SQL table through
  Flask-SQLAlchemy (used for local development and the test suite).

Both return tasks already serialized with ``serialize_task`` and both
raise ``bson.errors.InvalidId`` for identifiers that are not ObjectIds.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from bson import ObjectId
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from eulist import db
from eulist.models import Task, clean_changes, new_task_document, serialize_task

logger = logging.getLogger(__name__)

MONGO_SCHEMES = ("mongodb://", "mongodb+srv://")
COLLECTION_NAME = "tasks"

# Due date first, newest task first among equal due dates
LIST_ORDER = [("date", ASCENDING), ("createdAt", DESCENDING)]


class TaskStore(ABC):
    """Storage collaborator used by the task routes."""

    backend = "abstract"

    def init_app(self, app: Flask) -> None:
        """Register the store on ``app`` and open the connection."""
        app.extensions["task_store"] = self
        self.connect(app)

    @abstractmethod
    def connect(self, app: Flask) -> None:
        """Open the connection. Failures are logged, never raised."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""

    @abstractmethod
    def list_tasks(self) -> list[dict[str, Any]]:
        """Return every task ordered by due date, then newest first."""

    @abstractmethod
    def get_task(self, task_id: str) -> dict[str, Any] | None:
        """Return the task with ``task_id`` or None."""

    @abstractmethod
    def create_task(self, title: Any, date: datetime) -> dict[str, Any]:
        """Persist a new, not yet completed task and return it."""

    @abstractmethod
    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        """Apply ``changes`` to the task and return it, or None if missing."""

    @abstractmethod
    def delete_task(self, task_id: str) -> dict[str, Any] | None:
        """Remove the task and return it, or None if missing."""


# -----------------------------------------------------------------------------
# MongoDB
# -----------------------------------------------------------------------------

class MongoTaskStore(TaskStore):
    """
    Task store backed by a MongoDB collection.

    Args:
        uri: MongoDB connection string.
        db_name: Database used when the URI does not name one.
        timeout_ms: Server selection timeout for every operation.
        client: Pre-built client, mainly for tests. When given, ``uri``
            and ``timeout_ms`` are ignored.
    """

    backend = "mongodb"

    def __init__(
        self,
        uri: str | None = None,
        db_name: str = "eulist",
        timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ) -> None:
        self.uri = uri
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self._client = client
        self._collection = None

    @property
    def collection(self):
        if self._collection is None:
            raise RuntimeError("MongoTaskStore is not connected")
        return self._collection

    def connect(self, app: Flask | None = None) -> None:
        # Malformed URIs and unresolvable SRV records raise from the constructor
        try:
            if self._client is None:
                self._client = MongoClient(
                    self.uri,
                    serverSelectionTimeoutMS=self.timeout_ms,
                    tz_aware=True,
                )
            database = self._client.get_default_database(default=self.db_name)
            self._collection = database[COLLECTION_NAME]

            # MongoClient connects lazily; ping so a dead server shows up in the logs
            self._client.admin.command("ping")
            logger.info("Connected to MongoDB database '%s'", database.name)
        except (PyMongoError, ValueError) as exc:
            logger.error("Error connecting to MongoDB: %s", exc)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")

    def list_tasks(self) -> list[dict[str, Any]]:
        cursor = self.collection.find().sort(LIST_ORDER)
        return [serialize_task(document) for document in cursor]

    def get_task(self, task_id: str) -> dict[str, Any] | None:
        document = self.collection.find_one({"_id": ObjectId(task_id)})
        return serialize_task(document) if document else None

    def create_task(self, title: Any, date: datetime) -> dict[str, Any]:
        document = new_task_document(title, date)
        result = self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return serialize_task(document)

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        object_id = ObjectId(task_id)
        cleaned = clean_changes(changes)
        if not cleaned:
            document = self.collection.find_one({"_id": object_id})
        else:
            document = self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": cleaned},
                return_document=ReturnDocument.AFTER,
            )
        return serialize_task(document) if document else None

    def delete_task(self, task_id: str) -> dict[str, Any] | None:
        document = self.collection.find_one_and_delete({"_id": ObjectId(task_id)})
        return serialize_task(document) if document else None


# -----------------------------------------------------------------------------
# SQL (Flask-SQLAlchemy)
# -----------------------------------------------------------------------------

class SqlTaskStore(TaskStore):
    """
    Task store backed by the ``tasks`` table.

    Uses the Flask-SQLAlchemy scoped session, so every operation must run
    inside an application context (request handlers always do).
    """

    backend = "sql"

    def __init__(self, database: SQLAlchemy | None = None) -> None:
        self.db = database if database is not None else db
        self._app: Flask | None = None

    def init_app(self, app: Flask) -> None:
        app.config["SQLALCHEMY_DATABASE_URI"] = app.config["DATABASE_URL"]
        self.db.init_app(app)
        super().init_app(app)

    def connect(self, app: Flask) -> None:
        self._app = app
        with app.app_context():
            try:
                self.db.create_all()
                logger.info("Database tables created")
            except SQLAlchemyError as exc:
                logger.error("Error connecting to database: %s", exc)

    def close(self) -> None:
        if self._app is None:
            return
        with self._app.app_context():
            self.db.engine.dispose()
        logger.info("Database engine disposed")

    def _get(self, task_id: str) -> Task | None:
        return self.db.session.get(Task, str(ObjectId(task_id)))

    def _commit(self) -> None:
        try:
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            raise

    def list_tasks(self) -> list[dict[str, Any]]:
        stmt = select(Task).order_by(Task.date.asc(), Task.created_at.desc())
        return [task.to_dict() for task in self.db.session.scalars(stmt)]

    def get_task(self, task_id: str) -> dict[str, Any] | None:
        task = self._get(task_id)
        return task.to_dict() if task else None

    def create_task(self, title: Any, date: datetime) -> dict[str, Any]:
        task = Task(title=title, date=date, completed=False)
        self.db.session.add(task)
        self._commit()
        return task.to_dict()

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> dict[str, Any] | None:
        task = self._get(task_id)
        if task is None:
            return None

        # Validate everything before touching the row
        for name, value in clean_changes(changes).items():
            setattr(task, name, value)
        self._commit()
        return task.to_dict()

    def delete_task(self, task_id: str) -> dict[str, Any] | None:
        task = self._get(task_id)
        if task is None:
            return None

        removed = task.to_dict()
        self.db.session.delete(task)
        self._commit()
        return removed


def build_store(config: Mapping[str, Any]) -> TaskStore:
    """
    Build the task store described by the application configuration.

    A ``DATABASE_URL`` with a ``mongodb://`` or ``mongodb+srv://`` scheme
    selects MongoDB; anything else is handed to SQLAlchemy.
    """
    url = config["DATABASE_URL"]
    if url.startswith(MONGO_SCHEMES):
        store: TaskStore = MongoTaskStore(
            url,
            db_name=config.get("MONGO_DB_NAME", "eulist"),
            timeout_ms=config.get("MONGO_TIMEOUT_MS", 5000),
        )
    else:
        store = SqlTaskStore()
    logger.info("Using %s task store", store.backend)
    return store
