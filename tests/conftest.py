"""
Shared pytest fixtures for the task backend test suite.

Fixtures follow the Arrange-Act-Assert (AAA) pattern and keep tests
isolated: every test that touches storage gets freshly created tables,
and tasks are built through a factory with Faker-generated titles.

The application runs on the SQL task store against in-memory SQLite;
the MongoDB store is covered separately with mocked collections.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from eulist import create_app, db
from eulist.models import Task


# Initialize Faker for generating test data
fake = Faker()


def future(days: int = 7) -> datetime:
    """Return an aware UTC datetime ``days`` from now."""
    return datetime.now(timezone.utc) + timedelta(days=days)


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create application instance for the test session.

    Yields:
        Flask application configured for testing with the SQL store.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """
    Create a test client for making HTTP requests.

    Yields:
        Flask test client for making HTTP requests.
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Create fresh tables for each test and drop them afterwards.

    Yields:
        The Flask-SQLAlchemy extension, bound to the test app.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture for creating Task rows directly in the database.

    Example:
        def test_something(task_factory):
            task = task_factory(title="My Task")
            assert task.id is not None
    """

    def _create_task(
        title: str | None = None,
        date: datetime | None = None,
        completed: bool = False,
        created_at: datetime | None = None
    ) -> Task:
        task = Task(
            title=title or fake.sentence(nb_words=4),
            date=date or future(),
            completed=completed
        )
        if created_at is not None:
            task.created_at = created_at
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """A single pending task due in a week."""
    return task_factory(title="Sample Task", date=future(7))


# -----------------------------------------------------------------------------
# Test Data Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """Provide a valid body for POST /tasks."""
    return {
        "title": fake.sentence(nb_words=3),
        "date": future(7).isoformat(),
    }


@pytest.fixture
def api_headers() -> dict[str, str]:
    """Provide common headers for API requests."""
    return {
        "Content-Type": "application/json",
        "Accept": "application/json"
    }
