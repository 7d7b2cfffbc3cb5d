"""
Habit endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from auth import require_user_id
from db import get_session
from http_errors import server_error
from schemas import HabitCreate, HabitQuery, HabitToggle, HabitUpdate, total_pages
from services import habits as service

router = APIRouter(prefix="/api/habits", tags=["habits"])

NOT_FOUND = "Habit not found"


@router.get("")
def list_habits(
    query: Annotated[HabitQuery, Query()],
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        habits, total = service.get_habits(db, user_id, query)
    except Exception as e:
        raise server_error("fetch habits", e)
    return {
        "habits": habits,
        "total": total,
        "page": query.page,
        "limit": query.limit,
        "total_pages": total_pages(total, query.limit),
    }


@router.post("", status_code=201)
def create_habit(
    req: HabitCreate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        habit = service.create_habit(db, user_id, req)
    except Exception as e:
        raise server_error("create habit", e)
    return {"habit": habit}


@router.get("/statistics")
def get_statistics(
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Streak leaders, completion rate and entry counts for active habits."""
    try:
        statistics = service.get_habit_statistics(db, user_id)
    except Exception as e:
        raise server_error("fetch habit statistics", e)
    return {"statistics": statistics}


@router.get("/{habit_id}")
def get_habit(
    habit_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        habit = service.get_habit(db, habit_id, user_id)
    except Exception as e:
        raise server_error("fetch habit", e)
    if not habit:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"habit": habit}


@router.put("/{habit_id}")
def update_habit(
    habit_id: str,
    req: HabitUpdate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        habit = service.update_habit(db, habit_id, user_id, req)
    except Exception as e:
        raise server_error("update habit", e)
    if not habit:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"habit": habit}


@router.delete("/{habit_id}")
def delete_habit(
    habit_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        deleted = service.delete_habit(db, habit_id, user_id)
    except Exception as e:
        raise server_error("delete habit", e)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True}


@router.post("/{habit_id}/toggle")
def toggle_habit(
    habit_id: str,
    req: HabitToggle | None = None,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Check in for a day (today by default), or undo that check-in."""
    try:
        result = service.toggle_habit_entry(db, habit_id, user_id, req or HabitToggle())
    except Exception as e:
        raise server_error("toggle habit", e)
    if result is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return result
