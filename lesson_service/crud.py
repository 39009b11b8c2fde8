import datetime as dt
import math
import re
from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from .config import ORDERS_COLLECTION, PRODUCTS_COLLECTION
from .schemas import OrderCreate

_HEX_ID = re.compile(r"^[0-9a-fA-F]{24}$")
_INT64_LIMIT = 2 ** 63


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_ID.match(value))


# -----------------------------
# Lessons (Products collection)
# -----------------------------

def get_lessons(db: Database) -> list[dict]:
    return list(db[PRODUCTS_COLLECTION].find({}))


def get_lesson(db: Database, lesson_id: str) -> Optional[dict]:
    return db[PRODUCTS_COLLECTION].find_one({"_id": ObjectId(lesson_id)})


def coerce_decrement(value: Any) -> Optional[float]:
    """Turn a client supplied decrement into a positive number.

    Accepts JSON numbers and numeric strings. Returns None for anything else,
    including booleans, NaN, infinities and values <= 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value <= 0:
        return None
    # BSON ints are 64-bit; anything this large already exceeds any stock
    if value >= _INT64_LIMIT:
        return float(_INT64_LIMIT)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def decrease_stock(db: Database, lesson_id: str, quantity) -> Optional[dict]:
    """Atomically take ``quantity`` off the lesson's stock.

    The guard and the decrement are one conditional update, so concurrent
    calls can never push stock below zero. Returns the updated lesson, or
    None if it does not exist; raises ValueError("insufficient_stock") or
    ValueError("no_changes_made") when nothing was modified.
    """
    if quantity <= 0:
        raise ValueError("quantity must be > 0")

    oid = ObjectId(lesson_id)
    products = db[PRODUCTS_COLLECTION]

    updated = products.find_one_and_update(
        {"_id": oid, "stock": {"$gte": quantity}},
        {"$inc": {"stock": -quantity}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is not None:
        return updated

    # Nothing modified: find out why
    lesson = products.find_one({"_id": oid}, {"stock": 1})
    if lesson is None:
        return None
    stock = lesson.get("stock")
    if not isinstance(stock, (int, float)) or isinstance(stock, bool):
        stock = 0
    if stock < quantity:
        raise ValueError("insufficient_stock")
    raise ValueError("no_changes_made")


# -----------------------------
# Orders
# -----------------------------

def create_order(db: Database, order: OrderCreate) -> ObjectId:
    order_doc = {
        **order.model_dump(),
        "orderDate": dt.datetime.now(dt.timezone.utc),
    }
    result = db[ORDERS_COLLECTION].insert_one(order_doc)
    return result.inserted_id


def get_orders(db: Database) -> list[dict]:
    return list(db[ORDERS_COLLECTION].find({}))
