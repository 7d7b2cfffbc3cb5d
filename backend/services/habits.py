"""
Habit queries and check-ins, with streaks computed from habit entries.
"""
import logging
import math
import uuid
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Optional

from sqlmodel import Session, col, func, select

from models import Habit, HabitEntry, HabitFrequency
from schemas import HabitCreate, HabitQuery, HabitToggle, HabitUpdate
from time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#EC4899"]

TOP_N = 5
RATE_WINDOW_DAYS = 30

# allowed gap between check-ins, per frequency
STEP_DAYS = {
    HabitFrequency.DAILY: 1,
    HabitFrequency.WEEKLY: 7,
    HabitFrequency.MONTHLY: 30,
}


def calculate_streak(days: Iterable[date], frequency: HabitFrequency, today: date) -> tuple[int, int]:
    """Return (current, longest) streak over the given check-in days.

    Future days are ignored. The current streak is 0 once the latest
    check-in is more than one step behind today.
    """
    step = STEP_DAYS[frequency]
    past = sorted({d for d in days if d <= today})
    if not past:
        return 0, 0

    longest = run = 1
    for prev, cur in zip(past, past[1:]):
        run = run + 1 if (cur - prev).days <= step else 1
        longest = max(longest, run)

    current = 0
    if (today - past[-1]).days <= step:
        current = 1
        for prev, cur in zip(reversed(past[:-1]), reversed(past[1:])):
            if (cur - prev).days > step:
                break
            current += 1
    return current, longest


def habit_to_dict(habit: Habit, entries: list[HabitEntry], today: Optional[date] = None) -> dict:
    today = today or utcnow().date()
    current, longest = calculate_streak((e.day for e in entries), habit.frequency, today)
    done_today = sum(e.count for e in entries if e.day == today)
    return {
        **habit.model_dump(),
        "current_streak": current,
        "longest_streak": longest,
        "completed_today": done_today >= (habit.target_count or 1),
    }


def _entries_for(db: Session, habit_ids: list[str]) -> dict[str, list[HabitEntry]]:
    grouped: dict[str, list[HabitEntry]] = defaultdict(list)
    if habit_ids:
        statement = select(HabitEntry).where(col(HabitEntry.habit_id).in_(habit_ids))
        for entry in db.exec(statement).all():
            grouped[entry.habit_id].append(entry)
    return grouped


def _owned(db: Session, habit_id: str, user_id: str) -> Optional[Habit]:
    statement = select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
    return db.exec(statement).one_or_none()


def get_habits(db: Session, user_id: str, query: HabitQuery) -> tuple[list[dict], int]:
    conditions = [Habit.user_id == user_id, Habit.is_archived == query.is_archived]
    if query.frequency is not None:
        conditions.append(Habit.frequency == query.frequency)
    if query.search:
        conditions.append(col(Habit.title).icontains(query.search, autoescape=True))

    total = db.exec(select(func.count()).select_from(Habit).where(*conditions)).one()

    sort_field = "sort_order" if query.sort_by == "current_streak" else query.sort_by
    column = col(getattr(Habit, sort_field))
    statement = (
        select(Habit)
        .where(*conditions)
        .order_by(column.asc() if query.order == "asc" else column.desc(), col(Habit.created_at).asc())
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    habits = list(db.exec(statement).all())
    entries = _entries_for(db, [h.id for h in habits])
    result = [habit_to_dict(h, entries[h.id]) for h in habits]
    if query.sort_by == "current_streak":
        result.sort(key=lambda h: h["current_streak"], reverse=query.order == "desc")
    return result, total


def get_habit(db: Session, habit_id: str, user_id: str) -> Optional[dict]:
    habit = _owned(db, habit_id, user_id)
    if not habit:
        return None
    return habit_to_dict(habit, _entries_for(db, [habit.id])[habit.id])


def create_habit(db: Session, user_id: str, data: HabitCreate) -> dict:
    existing = db.exec(select(func.count()).select_from(Habit).where(Habit.user_id == user_id)).one()
    habit = Habit(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=data.title,
        description=data.description,
        color=data.color or DEFAULT_COLORS[existing % len(DEFAULT_COLORS)],
        icon=data.icon,
        frequency=data.frequency,
        target_count=data.target_count,
        sort_order=data.sort_order,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info("Created habit %s for user %s", habit.id, user_id)
    return habit_to_dict(habit, [])


def toggle_habit_entry(db: Session, habit_id: str, user_id: str, data: HabitToggle) -> Optional[dict]:
    """Check in (or undo a check-in) for one day.

    With no entry for the day one is created. With an entry, the count is
    decremented when the habit targets several check-ins a day; otherwise the
    entry is removed. Returns None when the habit is not the user's.
    """
    habit = _owned(db, habit_id, user_id)
    if not habit:
        return None

    day = data.day or utcnow().date()
    existing = db.exec(
        select(HabitEntry).where(HabitEntry.habit_id == habit.id, HabitEntry.day == day)
    ).first()

    created = False
    entry: Optional[HabitEntry] = None
    if existing is None:
        entry = HabitEntry(id=str(uuid.uuid4()), habit_id=habit.id, day=day, count=data.count, note=data.note)
        db.add(entry)
        created = True
    elif existing.count > 1 and habit.target_count > 1:
        existing.count -= 1
        db.add(existing)
        entry = existing
    else:
        db.delete(existing)
    db.commit()
    if entry is not None:
        db.refresh(entry)

    return {
        "created": created,
        "entry": entry.model_dump() if entry is not None else None,
        "habit": get_habit(db, habit.id, user_id),
    }


def update_habit(db: Session, habit_id: str, user_id: str, patch: HabitUpdate) -> Optional[dict]:
    """Apply the fields present in the patch. Returns None when the habit is not the user's."""
    habit = _owned(db, habit_id, user_id)
    if not habit:
        return None
    changes = patch.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(habit, key, value)
    habit.updated_at = utcnow()
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info("Updated habit %s (%s)", habit_id, ", ".join(sorted(changes)))
    return habit_to_dict(habit, _entries_for(db, [habit.id])[habit.id])


def delete_habit(db: Session, habit_id: str, user_id: str) -> bool:
    """Delete an owned habit together with its entries."""
    habit = _owned(db, habit_id, user_id)
    if not habit:
        return False
    for entry in db.exec(select(HabitEntry).where(HabitEntry.habit_id == habit.id)).all():
        db.delete(entry)
    db.delete(habit)
    db.commit()
    logger.info("Deleted habit %s for user %s", habit_id, user_id)
    return True


def completion_rate(
    days: dict[date, int], start: date, end: date, frequency: HabitFrequency, target: int
) -> int:
    """Percentage of periods between start and end (inclusive) whose first day met the target."""
    step = STEP_DAYS[frequency]
    total_days = (end - start).days + 1
    periods = math.ceil(total_days / step)
    if periods <= 0:
        return 0
    done = 0
    check = start
    while check <= end:
        if days.get(check, 0) >= target:
            done += 1
        check += timedelta(days=step)
    return round(done / periods * 100)


def get_habit_statistics(db: Session, user_id: str, today: Optional[date] = None) -> dict:
    """Streak leaders, today's completions and entry counts over the user's active habits."""
    today = today or utcnow().date()
    statement = select(Habit).where(Habit.user_id == user_id, col(Habit.is_archived).is_(False))
    habits = db.exec(statement).all()
    entries = _entries_for(db, [h.id for h in habits])

    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    window_start = today - timedelta(days=RATE_WINDOW_DAYS)

    completed_today = 0
    current_streaks = []
    longest_streaks = []
    total_entries = this_week = this_month = 0
    rate_sum = 0
    for habit in habits:
        habit_entries = entries[habit.id]
        counts: dict[date, int] = defaultdict(int)
        for e in habit_entries:
            counts[e.day] += e.count
        current, longest = calculate_streak(counts, habit.frequency, today)
        target = habit.target_count or 1

        if counts.get(today, 0) >= target:
            completed_today += 1
        if current > 0:
            current_streaks.append({"habit_id": habit.id, "habit_title": habit.title, "streak": current})
        longest_streaks.append({"habit_id": habit.id, "habit_title": habit.title, "streak": longest})

        total_entries += len(habit_entries)
        this_week += sum(1 for e in habit_entries if week_start <= e.day <= today)
        this_month += sum(1 for e in habit_entries if month_start <= e.day <= today)
        rate_sum += completion_rate(counts, window_start, today, habit.frequency, target)

    current_streaks.sort(key=lambda s: s["streak"], reverse=True)
    longest_streaks.sort(key=lambda s: s["streak"], reverse=True)
    return {
        "total_habits": len(habits),
        "active_habits": len(habits),
        "completed_today": completed_today,
        "current_streaks": current_streaks[:TOP_N],
        "longest_streaks": longest_streaks[:TOP_N],
        "completion_rate": round(rate_sum / len(habits)) if habits else 0,
        "total_entries": total_entries,
        "this_week_entries": this_week,
        "this_month_entries": this_month,
    }
