"""
Reminder business logic: ownership checks, fire time resolution and the
snooze / dismiss lifecycle.

Every lookup filters by user_id, so a reminder owned by someone else is
reported exactly like a missing one.
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, func, select

from errors import (
    ReminderInPastError,
    ReminderNotFoundError,
    ReminderStateError,
    ReminderValidationError,
)
from models import Reminder, ReminderStatus, Task
from schemas import ReminderCreate, ReminderQuery, ReminderUpdate, SnoozeRequest
from services.tasks import get_owned_task
from time_utils import to_utc, utcnow

logger = logging.getLogger(__name__)

SNOOZABLE = (ReminderStatus.PENDING, ReminderStatus.SNOOZED, ReminderStatus.SENT)
DISMISSIBLE = (ReminderStatus.PENDING, ReminderStatus.SNOOZED)


def _owned(db: Session, reminder_id: str, user_id: str) -> Optional[Reminder]:
    statement = select(Reminder).where(Reminder.id == reminder_id, Reminder.user_id == user_id)
    return db.exec(statement).one_or_none()


def _fire_at_from_offset(offset: int, anchor: Optional[datetime], now: datetime) -> datetime:
    """Resolve "offset minutes before anchor" and reject past results."""
    if anchor is None:
        raise ReminderValidationError("Task must have a due date for relative reminders")
    fire_at = anchor - timedelta(minutes=offset)
    if fire_at < now:
        raise ReminderInPastError()
    return fire_at


def get_reminder_by_id(db: Session, reminder_id: str, user_id: str) -> Optional[Reminder]:
    return _owned(db, reminder_id, user_id)


def get_reminders_by_task_id(db: Session, task_id: str, user_id: str) -> list[Reminder]:
    statement = (
        select(Reminder)
        .where(Reminder.task_id == task_id, Reminder.user_id == user_id)
        .order_by(Reminder.fire_at.asc())
    )
    return list(db.exec(statement).all())


def list_reminders(db: Session, user_id: str, query: ReminderQuery) -> tuple[list[Reminder], int]:
    conditions = [Reminder.user_id == user_id]
    if query.status is not None:
        conditions.append(Reminder.status == query.status)
    if query.type is not None:
        conditions.append(Reminder.type == query.type)
    if query.task_id:
        conditions.append(Reminder.task_id == query.task_id)

    total = db.exec(select(func.count()).select_from(Reminder).where(*conditions)).one()
    statement = (
        select(Reminder)
        .where(*conditions)
        .order_by(Reminder.fire_at.asc())
        .offset(query.offset)
        .limit(query.limit)
    )
    return list(db.exec(statement).all()), total


def create_reminder(
    db: Session, user_id: str, data: ReminderCreate, now: Optional[datetime] = None
) -> Reminder:
    now = to_utc(now) or utcnow()
    task = get_owned_task(db, data.task_id, user_id)

    if data.relative_offset is not None:
        fire_at = _fire_at_from_offset(data.relative_offset, to_utc(task.due_date), now)
    elif data.fire_at is not None:
        fire_at = to_utc(data.fire_at)
    elif task.due_date is not None:
        fire_at = to_utc(task.due_date)
    else:
        raise ReminderValidationError("Either fire_at or relative_offset must be provided")

    if fire_at < now:
        raise ReminderInPastError()

    reminder = Reminder(
        id=str(uuid.uuid4()),
        user_id=user_id,
        task_id=task.id,
        type=data.type,
        fire_at=fire_at,
        relative_offset=data.relative_offset,
    )
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    logger.info("Created reminder %s for task %s", reminder.id, task.id)
    return reminder


def update_reminder(
    db: Session,
    reminder_id: str,
    user_id: str,
    patch: ReminderUpdate,
    now: Optional[datetime] = None,
) -> Reminder:
    """Apply a partial update.

    All checks run before the row is touched, so a rejected update leaves
    the stored reminder as it was.
    """
    now = to_utc(now) or utcnow()
    reminder = _owned(db, reminder_id, user_id)
    if not reminder:
        raise ReminderNotFoundError()

    fields = patch.model_fields_set
    changes = {}

    if "fire_at" in fields:
        fire_at = to_utc(patch.fire_at)
        if fire_at < now:
            logger.warning("Rejected past fire_at for reminder %s", reminder_id)
            raise ReminderInPastError()
        changes["fire_at"] = fire_at

    if "relative_offset" in fields:
        if patch.relative_offset is not None:
            task = db.get(Task, reminder.task_id)
            anchor = to_utc(task.due_date if task and task.due_date else reminder.fire_at)
            changes["fire_at"] = _fire_at_from_offset(patch.relative_offset, anchor, now)
        changes["relative_offset"] = patch.relative_offset

    if "type" in fields and patch.type is not None:
        changes["type"] = patch.type
    if "status" in fields and patch.status is not None:
        changes["status"] = patch.status

    for key, value in changes.items():
        setattr(reminder, key, value)
    reminder.updated_at = now
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    logger.info("Updated reminder %s (%s)", reminder_id, ", ".join(sorted(changes)) or "no changes")
    return reminder


def delete_reminder(db: Session, reminder_id: str, user_id: str) -> bool:
    reminder = _owned(db, reminder_id, user_id)
    if not reminder:
        return False
    db.delete(reminder)
    db.commit()
    logger.info("Deleted reminder %s", reminder_id)
    return True


def snooze_reminder(
    db: Session,
    reminder_id: str,
    user_id: str,
    options: SnoozeRequest,
    now: Optional[datetime] = None,
) -> Reminder:
    now = to_utc(now) or utcnow()
    reminder = _owned(db, reminder_id, user_id)
    if not reminder:
        raise ReminderNotFoundError()
    if reminder.status not in SNOOZABLE:
        raise ReminderStateError("Can only snooze pending or sent reminders")

    if options.until is not None:
        snoozed_until = to_utc(options.until)
    else:
        snoozed_until = now + timedelta(minutes=options.minutes)
    if snoozed_until <= now:
        raise ReminderStateError("Snooze time must be in the future")

    reminder.status = ReminderStatus.SNOOZED
    reminder.snoozed_until = snoozed_until
    reminder.snooze_count += 1
    reminder.updated_at = now
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


def dismiss_reminder(
    db: Session, reminder_id: str, user_id: str, now: Optional[datetime] = None
) -> Reminder:
    now = to_utc(now) or utcnow()
    reminder = _owned(db, reminder_id, user_id)
    if not reminder:
        raise ReminderNotFoundError()
    if reminder.status not in DISMISSIBLE:
        raise ReminderStateError("Can only dismiss pending or snoozed reminders")

    reminder.status = ReminderStatus.DISMISSED
    reminder.dismissed_at = now
    reminder.snoozed_until = None
    reminder.updated_at = now
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder
