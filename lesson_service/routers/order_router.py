import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from pymongo.database import Database

from .. import crud
from ..database import get_db
from ..schemas import OrderCreate, OrderCreated, dump_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])

INVALID_ORDER = {"msg": "error", "error": "Invalid order data"}


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(payload: Any = Body(None), db: Database = Depends(get_db)):
    """Place an order.

    Body: ``name`` and ``phoneNumber`` (non-empty strings), ``lessonIDs`` (list)
    and ``numberOfSpace`` (number > 0). ``orderDate`` is set by the server.
    Lesson ids are stored as sent; stock is not checked here.
    """
    try:
        order = OrderCreate.model_validate(payload)
    except ValidationError as e:
        logger.info("Rejected order: %s", e.errors(include_url=False))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_ORDER)

    try:
        order_id = crud.create_order(db, order)
    except Exception:
        logger.exception("Error saving order")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return {"msg": "Order successfully placed", "orderId": str(order_id)}


@router.get("")
def list_orders(db: Database = Depends(get_db)):
    try:
        orders = crud.get_orders(db)
    except Exception:
        logger.exception("Error fetching orders")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return dump_document(orders)
