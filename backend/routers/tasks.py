"""
Minimal task endpoints; tasks anchor reminders and focus sessions.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from auth import require_user_id
from db import get_session
from http_errors import server_error
from schemas import TaskCreate
from services import tasks as service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.post("", status_code=201)
def create_task(
    req: TaskCreate,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    try:
        task = service.create_task(db, user_id, req)
    except Exception as e:
        raise server_error("create task", e)
    return {"task": task}


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    db: Session = Depends(get_session),
    user_id: str = Depends(require_user_id),
):
    """Delete a task and its reminders."""
    try:
        deleted = service.delete_task(db, task_id, user_id)
    except Exception as e:
        raise server_error("delete task", e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}
