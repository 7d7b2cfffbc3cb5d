"""
Reminder endpoints: CRUD by id, lookup by task, snooze and dismiss.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from auth import require_user_id
from db import get_session
from errors import DomainError
from http_errors import domain_error, server_error
from schemas import ReminderCreate, ReminderQuery, ReminderUpdate, SnoozeRequest
from services import reminders as service

router = APIRouter(prefix="/api/reminders", tags=["reminders"])

NOT_FOUND = "Reminder not found"


@router.get("")
def list_reminders(
    query: Annotated[ReminderQuery, Query()],
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """List the user's reminders, soonest first."""
    try:
        reminders, total = service.list_reminders(db, user_id, query)
    except Exception as e:
        raise server_error("fetch reminders", e)
    return {"reminders": reminders, "total": total, "limit": query.limit, "offset": query.offset}


@router.post("", status_code=201)
def create_reminder(
    req: ReminderCreate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Create a reminder for one of the user's tasks."""
    try:
        reminder = service.create_reminder(db, user_id, req)
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("create reminder", e)
    return {"reminder": reminder}


@router.get("/task/{task_id}")
def get_task_reminders(
    task_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """All of the user's reminders for a task, ordered by fire time."""
    try:
        reminders = service.get_reminders_by_task_id(db, task_id, user_id)
    except Exception as e:
        raise server_error("fetch reminders", e)
    return {"reminders": reminders}


@router.get("/{reminder_id}")
def get_reminder(
    reminder_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        reminder = service.get_reminder_by_id(db, reminder_id, user_id)
    except Exception as e:
        raise server_error("fetch reminder", e)
    if not reminder:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"reminder": reminder}


@router.put("/{reminder_id}")
def update_reminder(
    reminder_id: str,
    req: ReminderUpdate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Partially update a reminder. A fire time in the past is rejected with 400."""
    try:
        reminder = service.update_reminder(db, reminder_id, user_id, req)
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("update reminder", e)
    return {"reminder": reminder}


@router.delete("/{reminder_id}")
def delete_reminder(
    reminder_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        deleted = service.delete_reminder(db, reminder_id, user_id)
    except Exception as e:
        raise server_error("delete reminder", e)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True}


@router.post("/{reminder_id}/snooze")
def snooze_reminder(
    reminder_id: str,
    req: SnoozeRequest,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Push a reminder back by some minutes or to a specific time."""
    try:
        reminder = service.snooze_reminder(db, reminder_id, user_id, req)
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("snooze reminder", e)
    return {"reminder": reminder}


@router.post("/{reminder_id}/dismiss")
def dismiss_reminder(
    reminder_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        reminder = service.dismiss_reminder(db, reminder_id, user_id)
    except DomainError as e:
        raise domain_error(e)
    except Exception as e:
        raise server_error("dismiss reminder", e)
    return {"reminder": reminder}
