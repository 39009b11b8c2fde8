import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pymongo.database import Database

from .. import crud
from ..database import get_db
from ..schemas import Message, dump_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lessons", tags=["Lessons"])


@router.get("")
def list_lessons(db: Database = Depends(get_db)):
    try:
        lessons = crud.get_lessons(db)
    except Exception:
        logger.exception("Error fetching lessons")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return dump_document(lessons)


@router.get("/{lesson_id}")
def get_lesson(lesson_id: str, db: Database = Depends(get_db)):
    if not crud.is_valid_id(lesson_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid lesson ID format")

    try:
        lesson = crud.get_lesson(db, lesson_id)
    except Exception:
        logger.exception("Error fetching lesson %s", lesson_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")
    return dump_document(lesson)


@router.put("/{lesson_id}", response_model=Message)
def decrement_lesson_stock(
    lesson_id: str,
    payload: Any = Body(None),
    db: Database = Depends(get_db),
):
    """Take ``stockToDecrement`` places off a lesson.

    400 for a bad id, a bad amount, not enough stock or an update that changed
    nothing; 404 if the lesson does not exist.
    """
    if not crud.is_valid_id(lesson_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid lesson ID")

    raw = payload.get("stockToDecrement") if isinstance(payload, dict) else None
    quantity = crud.coerce_decrement(raw)
    if quantity is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid stock decrement value")

    logger.debug("Requested decrement for lesson %s: %s", lesson_id, quantity)

    try:
        lesson = crud.decrease_stock(db, lesson_id, quantity)
    except ValueError as e:
        if str(e) == "insufficient_stock":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Not enough stock available for the lesson",
            )
        if str(e) == "no_changes_made":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No changes made to the lesson stock",
            )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error updating lesson %s", lesson_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")

    logger.debug("Lesson %s stock is now %s", lesson_id, lesson.get("stock"))
    return {"msg": "Lesson stock updated successfully"}
