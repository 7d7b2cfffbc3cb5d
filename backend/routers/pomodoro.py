"""
Pomodoro sessions: start/complete sessions, list recent ones, fetch or delete one,
and statistics aggregated from finished sessions.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from auth import require_user_id
from db import get_session
from errors import DomainError
from http_errors import domain_error, server_error
from schemas import PomodoroComplete, PomodoroStart, StatisticsQuery
from services import pomodoro as service

router = APIRouter(prefix="/api/pomodoro", tags=["pomodoro"])

NOT_FOUND = "Pomodoro session not found"


@router.post("", status_code=201)
def start_session(
    req: PomodoroStart,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Start a focus session. Returns the new session with id and started_at."""
    try:
        focus_session = service.start_session(db, user_id, req)
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("start Pomodoro session", e)
    return {"session": focus_session}


@router.get("")
def list_sessions(
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """List recent sessions (newest first) for this user."""
    try:
        sessions = service.list_sessions(db, user_id, limit)
    except Exception as e:
        raise server_error("fetch Pomodoro sessions", e)
    return {"sessions": sessions}


@router.get("/statistics")
def get_statistics(
    query: Annotated[StatisticsQuery, Query()],
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Focus statistics for this user, optionally for one task or period."""
    try:
        statistics = service.get_pomodoro_statistics(
            db, user_id, task_id=query.task_id, period=query.period
        )
    except Exception as e:
        raise server_error("fetch Pomodoro statistics", e)
    return {"statistics": statistics}


@router.get("/{session_id}")
def get_pomodoro_session(
    session_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        focus_session = service.get_session_by_id(db, session_id, user_id)
    except Exception as e:
        raise server_error("fetch Pomodoro session", e)
    if not focus_session:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"session": focus_session}


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        deleted = service.delete_session(db, session_id, user_id)
    except Exception as e:
        raise server_error("delete Pomodoro session", e)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True}


@router.post("/{session_id}/complete")
def complete_session(
    session_id: str,
    req: PomodoroComplete | None = None,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """End a session. Sets completed_at to now; a finished session cannot be completed again."""
    try:
        focus_session = service.complete_session(db, session_id, user_id, req or PomodoroComplete())
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("complete Pomodoro session", e)
    return {"session": focus_session}
