"""
Request bodies and query parameters.

FastAPI validates these before a handler runs, so the services can trust
enum values, ranges and sort fields.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from models import GoalStatus, HabitFrequency, ReminderStatus, ReminderType, SessionType

SortDirection = Literal["asc", "desc"]

# one year, in minutes
MAX_RELATIVE_OFFSET = 525600


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


# --- Tasks ---

class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    due_date: Optional[datetime] = None


# --- Reminders ---

class ReminderCreate(BaseModel):
    task_id: str = Field(min_length=1)
    type: ReminderType = ReminderType.IN_APP
    fire_at: Optional[datetime] = None
    relative_offset: Optional[int] = Field(default=None, ge=0, le=MAX_RELATIVE_OFFSET)


class ReminderUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    type: Optional[ReminderType] = None
    fire_at: Optional[datetime] = None
    relative_offset: Optional[int] = Field(default=None, ge=0, le=MAX_RELATIVE_OFFSET)
    status: Optional[ReminderStatus] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        if "fire_at" in self.model_fields_set and self.fire_at is None:
            raise ValueError("fire_at cannot be null")
        return self


class ReminderQuery(BaseModel):
    status: Optional[ReminderStatus] = None
    type: Optional[ReminderType] = None
    task_id: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class SnoozeRequest(BaseModel):
    minutes: Optional[int] = Field(default=None, ge=1, le=10080)
    until: Optional[datetime] = None

    @model_validator(mode="after")
    def check_one_of(self):
        if self.minutes is None and self.until is None:
            raise ValueError("Either minutes or until must be provided")
        return self


# --- Pomodoro ---

class PomodoroStart(BaseModel):
    duration: int = Field(default=25, ge=1, le=180)
    break_duration: int = Field(default=5, ge=1, le=60)
    type: SessionType = SessionType.WORK
    task_id: Optional[str] = None


class PomodoroComplete(BaseModel):
    was_completed: bool = True


class StatisticsQuery(BaseModel):
    period: Literal["today", "week", "month", "all"] = "all"
    task_id: Optional[str] = None


# --- Goals ---

class GoalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    target_value: Optional[int] = Field(default=None, ge=1, le=1_000_000)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=50)
    deadline: Optional[datetime] = None
    sort_order: int = Field(default=0, ge=0)


class GoalUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    target_value: Optional[int] = Field(default=None, ge=1, le=1_000_000)
    current_value: Optional[int] = Field(default=None, ge=0, le=1_000_000)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=50)
    deadline: Optional[datetime] = None
    status: Optional[GoalStatus] = None
    sort_order: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in ("title", "current_value", "status", "sort_order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class GoalQuery(BaseModel):
    status: Optional[GoalStatus] = None
    search: Optional[str] = None
    sort_by: Literal["created_at", "title", "sort_order", "deadline", "progress"] = "sort_order"
    order: SortDirection = "asc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=100)


class GoalProgressUpdate(BaseModel):
    increment: Optional[int] = Field(default=None, ge=-1_000_000, le=1_000_000)
    set_value: Optional[int] = Field(default=None, ge=0, le=1_000_000)

    @model_validator(mode="after")
    def check_one_of(self):
        if self.increment is None and self.set_value is None:
            raise ValueError("At least one of increment or set_value must be provided")
        return self


# --- Habits ---

class HabitCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(default=None, max_length=10)
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_count: int = Field(default=1, ge=1, le=100)
    sort_order: int = Field(default=0, ge=0)


class HabitQuery(BaseModel):
    is_archived: bool = False
    frequency: Optional[HabitFrequency] = None
    search: Optional[str] = None
    sort_by: Literal["created_at", "title", "sort_order", "current_streak"] = "sort_order"
    order: SortDirection = "asc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=100)


class HabitToggle(BaseModel):
    day: Optional[date] = None
    count: int = Field(default=1, ge=1, le=100)
    note: Optional[str] = Field(default=None, max_length=500)


class HabitUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(default=None, max_length=10)
    frequency: Optional[HabitFrequency] = None
    target_count: Optional[int] = Field(default=None, ge=1, le=100)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_archived: Optional[bool] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in ("title", "color", "frequency", "target_count", "sort_order", "is_archived"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self
