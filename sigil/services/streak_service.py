"""
Streak and consistency calculations.
Daily tasks count consecutive days; weekly tasks (N times per week) count
consecutive Monday-start weeks that reached their frequency.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Set
from sqlalchemy.orm import Session

from sigil.constants import FREQUENCY_WEEKLY
from sigil.exceptions import TaskNotFoundException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import RecordEntry, TaskDefinition, StreakInfo
from sigil.services.date_service import DateService
from sigil.utils import round_half_up


def _is_weekly(task: Optional[TaskDefinition]) -> bool:
    return task is not None and task.frequency_type == FREQUENCY_WEEKLY


def _record_days(records: Iterable[RecordEntry], task: Optional[TaskDefinition]) -> Set[date]:
    """Distinct days with a qualifying record (any record when no task is given)."""
    return {r.date for r in records if task is None or r.task_type == task.id}


def _days_per_week(days: Iterable[date]) -> dict:
    counts = defaultdict(int)
    for day in days:
        counts[DateService.week_start(day)] += 1
    return counts


def current_streak(records: Iterable[RecordEntry], today: date, task: Optional[TaskDefinition] = None) -> int:
    """
    Current streak in days, or in weeks for weekly tasks.

    Daily: walk back from today (or from yesterday when today has no record
    yet) while each day has a record.

    Weekly: walk back week by week while the week has at least
    frequency_count distinct recorded days. The in-progress week is skipped
    when it has not reached the count yet, so it neither adds to nor breaks
    the streak.
    """
    days = {d for d in _record_days(records, task) if d <= today}
    if not days:
        return 0

    if _is_weekly(task):
        required = task.frequency_count or 1
        per_week = _days_per_week(days)
        week = DateService.week_start(today)
        if per_week[week] < required:
            week -= timedelta(weeks=1)
        streak = 0
        while per_week[week] >= required:
            streak += 1
            week -= timedelta(weeks=1)
        return streak

    cursor = today
    if cursor not in days:
        cursor -= timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def daily_consistency(
    records: Iterable[RecordEntry], window_days: int, today: date, task: Optional[TaskDefinition] = None
) -> int:
    """
    Consistency over the last `window_days` days as a rounded percentage.

    Daily tasks (or no task): share of days in the window with a record.
    Weekly tasks: share of Monday-start weeks overlapping the window whose
    distinct recorded days reach frequency_count. Each week is counted whole,
    including its days before the window start. With no overlapping weeks
    the result is 100.
    """
    if window_days <= 0:
        return 0

    start = today - timedelta(days=window_days - 1)
    days = _record_days(records, task)

    if _is_weekly(task):
        required = task.frequency_count or 1
        per_week = _days_per_week(days)
        weeks = []
        week = DateService.week_start(start)
        while week <= today:
            weeks.append(week)
            week += timedelta(weeks=1)
        if not weeks:
            return 100
        met = sum(1 for w in weeks if per_week[w] >= required)
        return round_half_up(met / len(weeks) * 100)

    active = sum(1 for d in days if start <= d <= today)
    return round_half_up(active / window_days * 100)


class StreakService:
    """Streak queries against a stored user state"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def get_streak_info(self, user_id: str, task_id: Optional[str] = None,
                        window_days: Optional[int] = None, today: Optional[date] = None) -> StreakInfo:
        state = self.state_repo.load(self.db, user_id)
        task = None
        if task_id:
            task = state.get_task(task_id)
            if task is None:
                raise TaskNotFoundException(task_id)

        today = today or DateService.get_effective_date(state.settings)
        window = window_days if window_days is not None else state.settings.consistency_days

        return StreakInfo(
            task_id=task_id,
            streak=current_streak(state.records, today, task),
            unit="weeks" if _is_weekly(task) else "days",
            consistency=daily_consistency(state.records, window, today, task),
        )
