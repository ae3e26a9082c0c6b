"""
Goal evaluation service.
Settles recurring task goals once per completed period and tracks fixed-window high goals.
"""
import logging
import uuid
from datetime import date, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from sigil.constants import (
    GOAL_INTERVAL_DAILY, GOAL_INTERVAL_WEEKLY, GOAL_INTERVAL_MONTHLY, GOAL_TYPE_AT_LEAST,
)
from sigil.exceptions import HighGoalNotFoundException, TaskNotFoundException, ValidationException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import (
    GoalCheckResult, GoalProgress, HighGoal, HighGoalCreate, HighGoalUpdate,
    HighGoalProgress, UserState,
)
from sigil.services.aggregation_service import aggregate_sum
from sigil.services.date_service import DateService
from sigil.utils import round_half_up

logger = logging.getLogger("sigil.goals")


def _short(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


def last_completed_period(interval: str, today: date) -> Tuple[date, date, str]:
    """
    Most recent fully completed period before today.

    Returns:
        Tuple of (start, end, period_name), e.g. for a weekly goal checked on
        a Wednesday: (last Monday - 7, last Sunday, "last week (Oct 5 - Oct 11)")
    """
    if interval == GOAL_INTERVAL_DAILY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday, "yesterday"

    if interval == GOAL_INTERVAL_WEEKLY:
        start, end = DateService.week_range(today - timedelta(weeks=1))
        return start, end, f"last week ({_short(start)} - {_short(end)})"

    if interval == GOAL_INTERVAL_MONTHLY:
        start, end = DateService.previous_month_range(today)
        return start, end, f"last month ({start.strftime('%B %Y')})"

    raise ValidationException("goalInterval", f"unknown interval '{interval}'")


def current_period(interval: str, today: date) -> Tuple[date, date]:
    """The in-progress period containing today."""
    if interval == GOAL_INTERVAL_DAILY:
        return today, today
    if interval == GOAL_INTERVAL_WEEKLY:
        return DateService.week_range(today)
    if interval == GOAL_INTERVAL_MONTHLY:
        return DateService.month_range(today)
    raise ValidationException("goalInterval", f"unknown interval '{interval}'")


def period_key(interval: str, period_end: date) -> str:
    return f"{interval}:{period_end.isoformat()}"


class GoalService:
    """Service for recurring goals and high goals"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def _today(self, state: UserState, today: Optional[date]) -> date:
        return today or DateService.get_effective_date(state.settings)

    # === Recurring task goals ===

    def evaluate_last_completed_period(
        self, user_id: str, task_id: str, today: Optional[date] = None
    ) -> Optional[GoalCheckResult]:
        """
        Check a task's goal against its last completed period and pay the bonus.

        Each (task, period) pair is settled at most once. The outcome is
        stored in settledGoalPeriods in the same write as the bonus; calling
        again for a settled period returns the stored outcome with
        already_evaluated=True and no bonus.

        Returns:
            GoalCheckResult, or None when the task is missing or has no goal
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)
        task = state.get_task(task_id)
        if task is None or task.goal is None:
            return None

        goal = task.goal
        today = self._today(state, today)
        start, end, period_name = last_completed_period(goal.interval, today)
        key = period_key(goal.interval, end)
        actual = aggregate_sum(state.records, start, end, task.id)

        result = GoalCheckResult(
            task_id=task.id,
            period_key=key,
            period_name=period_name,
            start_date=start,
            end_date=end,
            actual=actual,
            target=goal.target,
            met=False,
        )

        settled = state.settled_goal_periods.setdefault(task.id, {})
        if key in settled:
            logger.info(f"User {user_id}: goal for {task.name} already settled for {key}")
            result.met = settled[key]
            result.already_evaluated = True
            return result

        if goal.kind == GOAL_TYPE_AT_LEAST:
            result.met = actual >= goal.target
        else:
            result.met = actual <= goal.target

        if result.met and goal.bonus_percentage > 0:
            bonus = round_half_up(goal.target * goal.bonus_percentage / 100)
            state.bonus_points += bonus
            result.bonus_awarded = bonus

        settled[key] = result.met
        self.state_repo.save_fields(self.db, user_id, state, ["settled_goal_periods", "bonus_points"])

        logger.info(
            f"User {user_id}: goal for {task.name} {period_name}: "
            f"{actual}/{goal.target} met={result.met} bonus={result.bonus_awarded}"
        )
        return result

    def is_goal_met_for_last_period(self, user_id: str, task_id: str, today: Optional[date] = None) -> bool:
        """True only when the last completed period was settled as met."""
        state = self.state_repo.load(self.db, user_id)
        task = state.get_task(task_id)
        if task is None or task.goal is None:
            return False
        _, end, _ = last_completed_period(task.goal.interval, self._today(state, today))
        return state.settled_goal_periods.get(task.id, {}).get(period_key(task.goal.interval, end), False)

    def goal_progress(self, user_id: str, task_id: str, today: Optional[date] = None) -> Optional[GoalProgress]:
        """Actual vs target for the in-progress period of a task's goal."""
        state = self.state_repo.load(self.db, user_id)
        task = state.get_task(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        if task.goal is None:
            return None

        start, end = current_period(task.goal.interval, self._today(state, today))
        actual = aggregate_sum(state.records, start, end, task.id)
        return GoalProgress(
            task_id=task.id,
            goal=task.goal,
            start_date=start,
            end_date=end,
            actual=actual,
            percentage=min(100.0, actual / task.goal.target * 100),
        )

    # === High goals ===

    def list_high_goals(self, user_id: str) -> List[HighGoal]:
        return self.state_repo.load(self.db, user_id).high_goals

    def _validate_high_goal(self, state: UserState, goal: HighGoal) -> None:
        if state.get_task(goal.task_id) is None:
            raise ValidationException("taskId", f"task {goal.task_id} does not exist")
        if goal.target_value <= 0:
            raise ValidationException("targetValue", "must be greater than 0")
        if goal.end_date < goal.start_date:
            raise ValidationException("endDate", "must not be before startDate")

    def create_high_goal(self, user_id: str, data: HighGoalCreate) -> HighGoal:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        goal = HighGoal(id=str(uuid.uuid4()), **data.model_dump())
        self._validate_high_goal(state, goal)

        state.high_goals.append(goal)
        self.state_repo.save_fields(self.db, user_id, state, ["high_goals"])
        logger.info(f"User {user_id}: created high goal '{goal.name}'")
        return goal

    def update_high_goal(self, user_id: str, goal_id: str, data: HighGoalUpdate) -> HighGoal:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_high_goal(state, goal_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        updated = state.high_goals[index].model_copy(update=changes)
        self._validate_high_goal(state, updated)

        state.high_goals[index] = updated
        self.state_repo.save_fields(self.db, user_id, state, ["high_goals"])
        return updated

    def delete_high_goal(self, user_id: str, goal_id: str) -> None:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_high_goal(state, goal_id)
        del state.high_goals[index]
        self.state_repo.save_fields(self.db, user_id, state, ["high_goals"])

    def high_goal_progress(self, user_id: str, goal_id: str) -> HighGoalProgress:
        state = self.state_repo.load(self.db, user_id)
        return self._progress(state, state.high_goals[self._find_high_goal(state, goal_id)])

    def all_high_goal_progress(self, user_id: str) -> List[HighGoalProgress]:
        state = self.state_repo.load(self.db, user_id)
        return [self._progress(state, goal) for goal in state.high_goals]

    @staticmethod
    def _progress(state: UserState, goal: HighGoal) -> HighGoalProgress:
        progress = aggregate_sum(state.records, goal.start_date, goal.end_date, goal.task_id)
        percentage = min(100.0, progress / goal.target_value * 100) if goal.target_value > 0 else 0.0
        return HighGoalProgress(goal=goal, progress=progress, percentage=percentage)

    @staticmethod
    def _find_high_goal(state: UserState, goal_id: str) -> int:
        for index, goal in enumerate(state.high_goals):
            if goal.id == goal_id:
                return index
        raise HighGoalNotFoundException(goal_id)
