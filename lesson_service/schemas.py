import datetime as dt

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, field_validator
from typing import Any, List, Union


# Collection: orders
class OrderCreate(BaseModel):
    name: StrictStr = Field(..., min_length=1)
    phoneNumber: StrictStr = Field(..., min_length=1)
    lessonIDs: List[Any]
    numberOfSpace: Union[StrictInt, StrictFloat]

    @field_validator("numberOfSpace", mode="before")
    @classmethod
    def _not_bool(cls, v):
        if isinstance(v, bool):
            raise ValueError("numberOfSpace must be a number")
        return v

    @field_validator("numberOfSpace")
    @classmethod
    def _positive(cls, v):
        # also rejects NaN
        if not v > 0:
            raise ValueError("numberOfSpace must be > 0")
        return v


class OrderCreated(BaseModel):
    msg: str = "Order successfully placed"
    orderId: str


class Message(BaseModel):
    msg: str


def _utc_iso(value: dt.datetime) -> str:
    # stored dates are UTC; naive ones only lack the marker
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.isoformat()


def dump_document(doc: Any) -> Any:
    """Make a stored document JSON-ready (ObjectId -> hex string, datetime -> ISO-8601 UTC)."""
    return jsonable_encoder(doc, custom_encoder={ObjectId: str, dt.datetime: _utc_iso})
