"""
Goal endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from auth import require_user_id
from db import get_session
from http_errors import server_error
from schemas import GoalCreate, GoalProgressUpdate, GoalQuery, GoalUpdate, total_pages
from services import goals as service

router = APIRouter(prefix="/api/goals", tags=["goals"])

NOT_FOUND = "Goal not found"


@router.get("")
def list_goals(
    query: Annotated[GoalQuery, Query()],
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        goals, total = service.get_goals(db, user_id, query)
    except Exception as e:
        raise server_error("fetch goals", e)
    return {
        "goals": goals,
        "total": total,
        "page": query.page,
        "limit": query.limit,
        "total_pages": total_pages(total, query.limit),
    }


@router.post("", status_code=201)
def create_goal(
    req: GoalCreate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        goal = service.create_goal(db, user_id, req)
    except Exception as e:
        raise server_error("create goal", e)
    return {"goal": service.goal_to_dict(goal)}


@router.get("/statistics")
def get_statistics(
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Status counts, overall progress and deadline highlights."""
    try:
        statistics = service.get_goal_statistics(db, user_id)
    except Exception as e:
        raise server_error("fetch goal statistics", e)
    return {"statistics": statistics}


@router.get("/{goal_id}")
def get_goal(
    goal_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        goal = service.get_goal(db, goal_id, user_id)
    except Exception as e:
        raise server_error("fetch goal", e)
    if not goal:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"goal": service.goal_to_dict(goal)}


@router.put("/{goal_id}")
def update_goal(
    goal_id: str,
    req: GoalUpdate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        goal = service.update_goal(db, goal_id, user_id, req)
    except Exception as e:
        raise server_error("update goal", e)
    if not goal:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"goal": service.goal_to_dict(goal)}


@router.delete("/{goal_id}")
def delete_goal(
    goal_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        deleted = service.delete_goal(db, goal_id, user_id)
    except Exception as e:
        raise server_error("delete goal", e)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True}


@router.post("/{goal_id}/progress")
def update_progress(
    goal_id: str,
    req: GoalProgressUpdate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Increment or set a goal's current value."""
    try:
        goal = service.update_goal_progress(db, goal_id, user_id, req)
    except Exception as e:
        raise server_error("update goal progress", e)
    if not goal:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"goal": service.goal_to_dict(goal)}
