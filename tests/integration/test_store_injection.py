"""
Tests for running the API on an injected task store.

The application is built with a ``MongoTaskStore`` wrapping a mocked
client, showing that routes only depend on the store handed to
``create_app`` and that MongoDB documents come out in the same envelope.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from eulist import create_app, get_store
from eulist.store import MongoTaskStore

pytestmark = pytest.mark.integration

TASK_ID = "64b7f0c2a1b2c3d4e5f60718"


@pytest.fixture
def mongo_client():
    return MagicMock()


@pytest.fixture
def collection(mongo_client):
    return mongo_client.get_default_database.return_value.__getitem__.return_value


@pytest.fixture
def mongo_app(mongo_client):
    return create_app("testing", store=MongoTaskStore(client=mongo_client))


def test_injected_store_is_registered(mongo_app):
    assert isinstance(get_store(mongo_app), MongoTaskStore)


def test_list_tasks_from_mongo(mongo_app, collection):
    # Arrange
    collection.find.return_value.sort.return_value = [{
        "_id": ObjectId(TASK_ID),
        "title": "From Mongo",
        "date": datetime(2030, 6, 1, tzinfo=timezone.utc),
        "createdAt": datetime(2030, 1, 1, tzinfo=timezone.utc),
        "completed": False,
    }]

    # Act
    response = mongo_app.test_client().get("/tasks")

    # Assert
    assert response.status_code == 200
    assert response.get_json() == {
        "success": True,
        "count": 1,
        "data": [{
            "_id": TASK_ID,
            "title": "From Mongo",
            "date": "2030-06-01T00:00:00+00:00",
            "createdAt": "2030-01-01T00:00:00+00:00",
            "completed": False,
        }],
    }


def test_delete_missing_task_from_mongo(mongo_app, collection):
    # Arrange
    collection.find_one_and_delete.return_value = None

    # Act
    response = mongo_app.test_client().delete(f"/tasks/{TASK_ID}")

    # Assert
    assert response.status_code == 404
    assert response.get_json()["success"] is False
