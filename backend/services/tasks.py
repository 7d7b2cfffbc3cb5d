"""
Tasks are the anchor for reminders and Pomodoro sessions.
"""
import logging
import uuid

from sqlmodel import Session, select

from errors import TaskNotFoundError
from models import PomodoroSession, Reminder, Task
from schemas import TaskCreate
from time_utils import to_utc

logger = logging.getLogger(__name__)


def get_owned_task(db: Session, task_id: str, user_id: str) -> Task:
    statement = select(Task).where(Task.id == task_id, Task.user_id == user_id)
    task = db.exec(statement).one_or_none()
    if not task:
        raise TaskNotFoundError()
    return task


def create_task(db: Session, user_id: str, data: TaskCreate) -> Task:
    task = Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=data.title.strip() or "Untitled",
        due_date=to_utc(data.due_date),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Created task %s for user %s", task.id, user_id)
    return task


def delete_task(db: Session, task_id: str, user_id: str) -> bool:
    """Delete an owned task together with its reminders."""
    statement = select(Task).where(Task.id == task_id, Task.user_id == user_id)
    task = db.exec(statement).one_or_none()
    if not task:
        return False
    for reminder in db.exec(select(Reminder).where(Reminder.task_id == task.id)).all():
        db.delete(reminder)
    # sessions outlive their task
    for focus_session in db.exec(
        select(PomodoroSession).where(PomodoroSession.task_id == task.id)
    ).all():
        focus_session.task_id = None
        db.add(focus_session)
    db.delete(task)
    db.commit()
    logger.info("Deleted task %s for user %s", task_id, user_id)
    return True
