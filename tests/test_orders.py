"""Tests for order placement and listing."""

import datetime as dt
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from lesson_service import crud
from lesson_service.schemas import dump_document

VALID_ORDER = {
    "name": "Ada Lovelace",
    "phoneNumber": "07700900123",
    "lessonIDs": ["65a1f0c2e4b0a1b2c3d4e5f6"],
    "numberOfSpace": 2,
}
INVALID = {"msg": "error", "error": "Invalid order data"}


def test_create_order(client, db):
    response = client.post("/orders", json=VALID_ORDER)
    assert response.status_code == 201
    body = response.json()
    assert body["msg"] == "Order successfully placed"

    stored = db["orders"].find_one({"_id": ObjectId(body["orderId"])})
    assert stored["name"] == "Ada Lovelace"
    assert stored["lessonIDs"] == ["65a1f0c2e4b0a1b2c3d4e5f6"]
    assert isinstance(stored["orderDate"], dt.datetime)


def test_created_order_is_listed(client):
    order_id = client.post("/orders", json=VALID_ORDER).json()["orderId"]

    response = client.get("/orders")
    assert response.status_code == 200
    orders = response.json()
    assert [o["_id"] for o in orders] == [order_id]
    assert orders[0]["numberOfSpace"] == 2
    # ISO-8601 UTC timestamp assigned by the server
    order_date = dt.datetime.fromisoformat(orders[0]["orderDate"])
    assert orders[0]["orderDate"].endswith("+00:00")
    assert order_date.utcoffset() == dt.timedelta(0)


def test_list_orders_before_any_order(client):
    response = client.get("/orders")
    assert response.status_code == 200
    assert response.json() == []


def test_order_does_not_touch_stock(client, db, lesson):
    order = {**VALID_ORDER, "lessonIDs": [str(lesson["_id"])], "numberOfSpace": 50}
    assert client.post("/orders", json=order).status_code == 201
    assert db["Products"].find_one({"_id": lesson["_id"]})["stock"] == 5


@pytest.mark.parametrize(
    "change",
    [
        {"phoneNumber": None},
        {"name": ""},
        {"name": 42},
        {"phoneNumber": ""},
        {"lessonIDs": "65a1f0c2e4b0a1b2c3d4e5f6"},
        {"lessonIDs": None},
        {"numberOfSpace": "2"},
        {"numberOfSpace": 0},
        {"numberOfSpace": -1},
        {"numberOfSpace": True},
    ],
)
def test_create_order_invalid(client, db, change):
    order = {**VALID_ORDER, **change}
    response = client.post("/orders", json=order)
    assert response.status_code == 400
    assert response.json() == INVALID
    assert db["orders"].count_documents({}) == 0


def test_create_order_missing_phone_number(client, db):
    order = {k: v for k, v in VALID_ORDER.items() if k != "phoneNumber"}
    response = client.post("/orders", json=order)
    assert response.status_code == 400
    assert response.json() == INVALID
    assert db["orders"].count_documents({}) == 0


def test_create_order_not_an_object(client, db):
    response = client.post("/orders", json=[VALID_ORDER])
    assert response.status_code == 400
    assert response.json() == INVALID


def test_create_order_malformed_json(client, db):
    response = client.post("/orders", content=b"{", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"msg": "error", "error": "Invalid request body"}
    assert db["orders"].count_documents({}) == 0


def test_create_order_store_failure(client, monkeypatch):
    monkeypatch.setattr(crud, "create_order", MagicMock(side_effect=PyMongoError("down")))
    response = client.post("/orders", json=VALID_ORDER)
    assert response.status_code == 500
    assert response.json() == {"msg": "error", "error": "Internal Server Error"}


def test_dump_document_marks_dates_utc():
    naive = dt.datetime(2026, 10, 19, 9, 1, 17, 521000)
    aware = naive.replace(tzinfo=dt.timezone.utc)
    body = dump_document([{"orderDate": naive}, {"orderDate": aware}])
    assert body == [
        {"orderDate": "2026-10-19T09:01:17.521000+00:00"},
        {"orderDate": "2026-10-19T09:01:17.521000+00:00"},
    ]
