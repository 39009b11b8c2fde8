import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from lesson_service.database import get_db
from lesson_service.main import app


@pytest.fixture
def db():
    return mongomock.MongoClient()["lessons_test"]


@pytest.fixture
def client(db):
    # no context manager: skip the startup hook that dials a real server
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lesson(db):
    doc = {
        "_id": ObjectId(),
        "subject": "Math",
        "location": "London",
        "price": 100,
        "stock": 5,
    }
    db["Products"].insert_one(doc)
    return doc
