"""
Statistics queries.
Loads a user's state once and runs the pure aggregation, level and streak functions over it.
"""
from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.constants import BREACH_STATUS_BREACHED
from sigil.exceptions import TaskNotFoundException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import (
    DailyTotal, DashboardResponse, TaskDistributionEntry, UserState, WeekdayEntry,
    WeeklyRollupEntry, WeekStats,
)
from sigil.services import aggregation_service as aggregation
from sigil.services.date_service import DateService
from sigil.services.level_service import resolve_level
from sigil.services.streak_service import current_streak, daily_consistency


class StatsService:
    """Read-only statistics for one user"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def _load(self, user_id: str, task_id: Optional[str] = None) -> UserState:
        state = self.state_repo.load(self.db, user_id)
        if task_id and state.get_task(task_id) is None:
            raise TaskNotFoundException(task_id)
        return state

    @staticmethod
    def _today(state: UserState, today: Optional[date]) -> date:
        return today or DateService.get_effective_date(state.settings)

    def get_dashboard(self, user_id: str, today: Optional[date] = None) -> DashboardResponse:
        """Level, overall streak, consistency and recent total, windowed by the user's settings."""
        state = self._load(user_id)
        today = self._today(state, today)
        settings = state.settings
        window_start = today - timedelta(days=settings.total_days - 1)

        return DashboardResponse(
            level=resolve_level(state.total_experience),
            total_experience=state.total_experience,
            streak=current_streak(state.records, today),
            consistency=daily_consistency(state.records, settings.consistency_days, today),
            consistency_days=settings.consistency_days,
            total_last_days=aggregation.aggregate_sum(state.records, window_start, today),
            total_days=settings.total_days,
            freeze_crystals=state.freeze_crystals,
            pending_breaches=[b for b in state.breaches if b.status == BREACH_STATUS_BREACHED],
        )

    def aggregate(self, user_id: str, start: date, end: date, task_id: Optional[str] = None) -> float:
        return aggregation.aggregate_sum(self._load(user_id, task_id).records, start, end, task_id)

    def yearly(self, user_id: str, year: int, task_id: Optional[str] = None) -> float:
        return aggregation.yearly_sum(self._load(user_id, task_id).records, year, task_id)

    def distribution_by_task(self, user_id: str, start: date, end: date,
                             task_id: Optional[str] = None) -> List[TaskDistributionEntry]:
        state = self._load(user_id, task_id)
        return aggregation.distribution_by_task(state.records, start, end, state.task_definitions, task_id)

    def distribution_by_weekday(self, user_id: str, start: date, end: date,
                                task_id: Optional[str] = None) -> List[WeekdayEntry]:
        return aggregation.distribution_by_weekday(self._load(user_id, task_id).records, start, end, task_id)

    def weekly_rollup(self, user_id: str, number_of_weeks: int, task_id: Optional[str] = None,
                      today: Optional[date] = None) -> List[WeeklyRollupEntry]:
        state = self._load(user_id, task_id)
        return aggregation.weekly_rollup(state.records, number_of_weeks, self._today(state, today), task_id)

    def completed_week(self, user_id: str, week_offset: int, task_id: Optional[str] = None,
                       today: Optional[date] = None) -> WeekStats:
        state = self._load(user_id, task_id)
        return aggregation.completed_week_stats(state.records, week_offset, self._today(state, today), task_id)

    def daily_totals(self, user_id: str, start: date, end: date,
                     task_id: Optional[str] = None) -> List[DailyTotal]:
        state = self._load(user_id, task_id)
        return aggregation.daily_totals(state.records, start, end, state.task_definitions, task_id)
