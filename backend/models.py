from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from time_utils import utcnow


class ReminderType(str, Enum):
    IN_APP = "IN_APP"
    PUSH = "PUSH"
    EMAIL = "EMAIL"


class ReminderStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    DISMISSED = "DISMISSED"
    SNOOZED = "SNOOZED"


class SessionType(str, Enum):
    WORK = "work"
    BREAK = "break"


class GoalStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Task(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    user_id: str = Field(index=True)
    title: str
    due_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class Reminder(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    user_id: str = Field(index=True)
    task_id: str = Field(foreign_key="task.id", index=True)
    type: ReminderType = ReminderType.IN_APP
    fire_at: datetime = Field(index=True)
    # minutes before the task due date
    relative_offset: Optional[int] = None
    status: ReminderStatus = ReminderStatus.PENDING
    snoozed_until: Optional[datetime] = None
    snooze_count: int = 0
    sent_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PomodoroSession(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    user_id: str = Field(index=True)
    task_id: Optional[str] = Field(default=None, foreign_key="task.id", index=True)
    type: SessionType = SessionType.WORK
    duration: int = 25
    break_duration: int = 5
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    was_completed: bool = False


class Goal(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    user_id: str = Field(index=True)
    title: str
    description: Optional[str] = None
    target_value: Optional[int] = None
    current_value: int = 0
    unit: Optional[str] = None
    deadline: Optional[datetime] = None
    status: GoalStatus = GoalStatus.ACTIVE
    sort_order: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Habit(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    user_id: str = Field(index=True)
    title: str
    description: Optional[str] = None
    color: str = "#3B82F6"
    icon: Optional[str] = None
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_count: int = 1
    sort_order: int = 0
    is_archived: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class HabitEntry(SQLModel, table=True):
    id: str = Field(primary_key=True, index=True)
    habit_id: str = Field(foreign_key="habit.id", index=True)
    day: date
    count: int = 1
    note: Optional[str] = None
