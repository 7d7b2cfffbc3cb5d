"""
Pomodoro focus sessions: start, complete, look up, list and delete, plus the
statistics that are aggregated from finished sessions.

Durations are planned minutes (`duration`), not wall-clock time. Days are
UTC calendar dates of `started_at`.
"""
import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Optional

from sqlmodel import Session, col, select

from errors import SessionAlreadyCompletedError, SessionNotFoundError
from models import PomodoroSession, SessionType, Task
from schemas import PomodoroComplete, PomodoroStart
from services.tasks import get_owned_task
from time_utils import start_of_day, start_of_month, start_of_week, to_utc, utc_date, utcnow

logger = logging.getLogger(__name__)


def start_session(db: Session, user_id: str, data: PomodoroStart) -> PomodoroSession:
    """Start a focus (or break) session, optionally linked to one of the user's tasks."""
    if data.task_id:
        get_owned_task(db, data.task_id, user_id)
    focus_session = PomodoroSession(
        id=str(uuid.uuid4()),
        user_id=user_id,
        task_id=data.task_id or None,
        type=data.type,
        duration=data.duration,
        break_duration=data.break_duration,
        started_at=utcnow(),
    )
    db.add(focus_session)
    db.commit()
    db.refresh(focus_session)
    logger.info("Started %s session %s for user %s", data.type.value, focus_session.id, user_id)
    return focus_session


def get_session_by_id(db: Session, session_id: str, user_id: str) -> Optional[PomodoroSession]:
    statement = select(PomodoroSession).where(
        PomodoroSession.id == session_id, PomodoroSession.user_id == user_id
    )
    return db.exec(statement).one_or_none()


def complete_session(
    db: Session, session_id: str, user_id: str, data: PomodoroComplete
) -> PomodoroSession:
    """Finish a session. Finished sessions never change again."""
    focus_session = get_session_by_id(db, session_id, user_id)
    if not focus_session:
        raise SessionNotFoundError()
    if focus_session.completed_at is not None:
        raise SessionAlreadyCompletedError()
    focus_session.completed_at = utcnow()
    focus_session.was_completed = data.was_completed
    db.add(focus_session)
    db.commit()
    db.refresh(focus_session)
    return focus_session


def list_sessions(db: Session, user_id: str, limit: int = 20) -> list[PomodoroSession]:
    """Recent sessions, newest first."""
    statement = (
        select(PomodoroSession)
        .where(PomodoroSession.user_id == user_id)
        .order_by(PomodoroSession.started_at.desc())
        .limit(limit)
    )
    return list(db.exec(statement).all())


def delete_session(db: Session, session_id: str, user_id: str) -> bool:
    focus_session = get_session_by_id(db, session_id, user_id)
    if not focus_session:
        return False
    db.delete(focus_session)
    db.commit()
    logger.info("Deleted session %s for user %s", session_id, user_id)
    return True


# --- Statistics ---


def period_start(period: str, now: datetime) -> Optional[datetime]:
    today = utc_date(now)
    if period == "today":
        return start_of_day(today)
    if period == "week":
        return start_of_week(today)
    if period == "month":
        return start_of_month(today)
    return None


def _is_completed_work(s: PomodoroSession) -> bool:
    return s.type == SessionType.WORK and s.was_completed


def _day_gap(a: date, b: date) -> int:
    return abs((a - b).days)


def current_streak(sessions: Sequence[PomodoroSession]) -> int:
    """Consecutive completed sessions counting back from the newest one.

    Running sessions are skipped. The run ends at the first finished session
    that was not completed, or at a gap of more than one day.
    """
    streak = 0
    last_day: Optional[date] = None
    for s in sorted(sessions, key=lambda x: to_utc(x.started_at), reverse=True):
        if s.completed_at is None and not s.was_completed:
            continue
        if not s.was_completed:
            break
        day = utc_date(s.started_at)
        if last_day is not None and _day_gap(last_day, day) > 1:
            break
        streak += 1
        last_day = day
    return streak


def longest_streak(sessions: Sequence[PomodoroSession]) -> int:
    """Longest run of completed sessions with no more than one day between them."""
    completed = sorted((s for s in sessions if s.was_completed), key=lambda x: to_utc(x.started_at))
    if not completed:
        return 0
    longest = run = 1
    last_day = utc_date(completed[0].started_at)
    for s in completed[1:]:
        day = utc_date(s.started_at)
        if _day_gap(day, last_day) <= 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
        last_day = day
    return longest


def sessions_by_day(sessions: Sequence[PomodoroSession]) -> list[dict]:
    grouped: dict[str, dict] = {}
    for s in sessions:
        key = utc_date(s.started_at).isoformat()
        bucket = grouped.setdefault(key, {"work_time": 0, "break_time": 0, "sessions": 0})
        if s.was_completed:
            if s.type == SessionType.WORK:
                bucket["work_time"] += s.duration
            else:
                bucket["break_time"] += s.duration
        bucket["sessions"] += 1
    return [{"date": key, **grouped[key]} for key in sorted(grouped)]


def calculate_statistics(
    sessions: Sequence[PomodoroSession],
    now: Optional[datetime] = None,
    task_titles: Optional[Mapping[str, str]] = None,
) -> dict:
    """Aggregate session records. Never modifies them; zero sessions give all-zero output.

    task_titles maps task ids to titles for the per-task breakdown; a task
    missing from it is reported with a null title.
    """
    task_titles = task_titles or {}
    now = to_utc(now) or utcnow()
    work = [s for s in sessions if _is_completed_work(s)]

    total_focus = sum(s.duration for s in work)
    today_start = start_of_day(now.date())
    week_start = start_of_week(now.date())

    by_task: dict[str, dict] = {}
    for s in work:
        if s.task_id:
            entry = by_task.setdefault(
                s.task_id, {"task_title": task_titles.get(s.task_id), "count": 0, "total_time": 0}
            )
            entry["count"] += 1
            entry["total_time"] += s.duration

    return {
        "total_sessions": len(sessions),
        "completed_sessions": sum(1 for s in sessions if s.was_completed),
        "abandoned_sessions": sum(
            1 for s in sessions if not s.was_completed and s.completed_at is not None
        ),
        "total_focus_time": total_focus,
        "today_focus_time": sum(s.duration for s in work if to_utc(s.started_at) >= today_start),
        "week_focus_time": sum(s.duration for s in work if to_utc(s.started_at) >= week_start),
        "average_session_length": (total_focus / len(work)) if work else 0,
        "current_streak": current_streak(sessions),
        "longest_streak": longest_streak(sessions),
        "sessions_by_task": by_task,
        "sessions_by_day": sessions_by_day(sessions),
    }


def get_pomodoro_statistics(
    db: Session,
    user_id: str,
    task_id: Optional[str] = None,
    period: str = "all",
    now: Optional[datetime] = None,
) -> dict:
    now = to_utc(now) or utcnow()
    statement = select(PomodoroSession).where(PomodoroSession.user_id == user_id)
    if task_id:
        statement = statement.where(PomodoroSession.task_id == task_id)
    since = period_start(period, now)
    if since is not None:
        statement = statement.where(PomodoroSession.started_at >= since)
    sessions = db.exec(statement.order_by(PomodoroSession.started_at.desc())).all()

    task_ids = {s.task_id for s in sessions if s.task_id}
    titles = {}
    if task_ids:
        rows = db.exec(select(Task.id, Task.title).where(col(Task.id).in_(sorted(task_ids)))).all()
        titles = {row[0]: row[1] for row in rows}
    return calculate_statistics(sessions, now=now, task_titles=titles)
