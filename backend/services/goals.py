"""
Goal queries, creation, edits, progress updates and statistics.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Session, col, func, select

from models import Goal, GoalStatus
from schemas import GoalCreate, GoalProgressUpdate, GoalQuery, GoalUpdate
from time_utils import start_of_month, start_of_year, to_utc, utcnow

logger = logging.getLogger(__name__)

TOP_N = 5


def goal_progress(current_value: int, target_value: Optional[int]) -> int:
    """Percentage 0-100; goals without a target report 0."""
    if not target_value:
        return 0
    return min(100, max(0, round(max(0, current_value) / target_value * 100)))


def days_until(deadline: Optional[datetime], now: datetime) -> Optional[int]:
    if deadline is None:
        return None
    return (to_utc(deadline).date() - now.date()).days


def goal_to_dict(goal: Goal, now: Optional[datetime] = None) -> dict:
    now = to_utc(now) or utcnow()
    days_remaining = days_until(goal.deadline, now)
    return {
        **goal.model_dump(),
        "progress": goal_progress(goal.current_value, goal.target_value),
        "is_overdue": days_remaining is not None and days_remaining < 0,
        "days_remaining": days_remaining,
    }


def _owned(db: Session, goal_id: str, user_id: str) -> Optional[Goal]:
    statement = select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    return db.exec(statement).one_or_none()


def get_goals(db: Session, user_id: str, query: GoalQuery) -> tuple[list[dict], int]:
    conditions = [Goal.user_id == user_id]
    if query.status is not None:
        conditions.append(Goal.status == query.status)
    if query.search:
        # literal substring; % and _ in the search text are not wildcards
        conditions.append(col(Goal.title).icontains(query.search, autoescape=True))

    total = db.exec(select(func.count()).select_from(Goal).where(*conditions)).one()

    # progress is derived, so that sort happens on the fetched page
    column = col(Goal.sort_order) if query.sort_by == "progress" else col(getattr(Goal, query.sort_by))
    ordering = column.asc() if query.order == "asc" else column.desc()
    statement = (
        select(Goal)
        .where(*conditions)
        .order_by(ordering, col(Goal.created_at).asc())
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    goals = [goal_to_dict(g) for g in db.exec(statement).all()]
    if query.sort_by == "progress":
        goals.sort(key=lambda g: g["progress"], reverse=query.order == "desc")
    return goals, total


def get_goal(db: Session, goal_id: str, user_id: str) -> Optional[Goal]:
    return _owned(db, goal_id, user_id)


def create_goal(db: Session, user_id: str, data: GoalCreate) -> Goal:
    goal = Goal(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=data.title,
        description=data.description,
        target_value=data.target_value,
        unit=data.unit,
        deadline=to_utc(data.deadline),
        sort_order=data.sort_order,
        status=GoalStatus.ACTIVE,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("Created goal %s for user %s", goal.id, user_id)
    return goal


def update_goal(db: Session, goal_id: str, user_id: str, patch: GoalUpdate) -> Optional[Goal]:
    """Apply the fields present in the patch. Returns None when the goal is not the user's."""
    goal = _owned(db, goal_id, user_id)
    if not goal:
        return None
    changes = patch.model_dump(exclude_unset=True)
    if "deadline" in changes:
        changes["deadline"] = to_utc(changes["deadline"])
    for key, value in changes.items():
        setattr(goal, key, value)
    goal.updated_at = utcnow()
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("Updated goal %s (%s)", goal_id, ", ".join(sorted(changes)))
    return goal


def delete_goal(db: Session, goal_id: str, user_id: str) -> bool:
    goal = _owned(db, goal_id, user_id)
    if not goal:
        return False
    db.delete(goal)
    db.commit()
    logger.info("Deleted goal %s for user %s", goal_id, user_id)
    return True


def update_goal_progress(
    db: Session, goal_id: str, user_id: str, data: GoalProgressUpdate
) -> Optional[Goal]:
    """Increment and/or set current_value; an active goal that reaches its target completes."""
    goal = _owned(db, goal_id, user_id)
    if not goal:
        return None

    current = goal.current_value
    if data.increment is not None:
        current = max(0, current + data.increment)
    if data.set_value is not None:
        current = data.set_value

    goal.current_value = current
    if goal.status == GoalStatus.ACTIVE and goal.target_value and current >= goal.target_value:
        goal.status = GoalStatus.COMPLETED
        logger.info("Goal %s reached its target", goal_id)
    goal.updated_at = utcnow()
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal


def get_goal_statistics(db: Session, user_id: str, now: Optional[datetime] = None) -> dict:
    """Counts by status plus progress and deadline highlights for active goals.

    A completed goal counts toward this month/year by its last update time.
    """
    now = to_utc(now) or utcnow()
    goals = db.exec(select(Goal).where(Goal.user_id == user_id)).all()

    by_status = {status: [] for status in GoalStatus}
    for goal in goals:
        by_status[goal.status].append(goal)
    active = by_status[GoalStatus.ACTIVE]
    completed = by_status[GoalStatus.COMPLETED]

    progressed = []
    deadlines = []
    for goal in active:
        progress = goal_progress(goal.current_value, goal.target_value)
        progressed.append({
            "goal_id": goal.id,
            "goal_title": goal.title,
            "progress": progress,
            "current_value": goal.current_value,
            "target_value": goal.target_value,
        })
        if goal.deadline is not None:
            deadlines.append({
                "goal_id": goal.id,
                "goal_title": goal.title,
                "deadline": to_utc(goal.deadline),
                "days_remaining": days_until(goal.deadline, now),
                "progress": progress,
            })
    progressed.sort(key=lambda g: g["progress"], reverse=True)
    deadlines.sort(key=lambda g: g["days_remaining"])

    month_start = start_of_month(now.date())
    year_start = start_of_year(now.date())
    overall = round(sum(g["progress"] for g in progressed) / len(active)) if active else 0

    return {
        "total_goals": len(goals),
        "active_goals": len(active),
        "completed_goals": len(completed),
        "paused_goals": len(by_status[GoalStatus.PAUSED]),
        "abandoned_goals": len(by_status[GoalStatus.ABANDONED]),
        "overall_progress": overall,
        "goals_completed_this_month": sum(
            1 for g in completed if to_utc(g.updated_at) >= month_start
        ),
        "goals_completed_this_year": sum(
            1 for g in completed if to_utc(g.updated_at) >= year_start
        ),
        "nearest_deadlines": deadlines[:TOP_N],
        "most_progressed": progressed[:TOP_N],
    }
