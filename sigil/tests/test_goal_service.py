"""
Tests for GoalService.

Tests cover:
1. Last completed period boundaries
2. Goal evaluation for at_least and no_more_than goals
3. Idempotency of settled periods
4. High goal validation and progress
"""
import pytest
from datetime import date, timedelta

from sigil.exceptions import HighGoalNotFoundException, ValidationException
from sigil.schemas import HighGoalCreate, HighGoalUpdate
from sigil.services.goal_service import GoalService, last_completed_period, period_key
from sigil.tests.conftest import make_record, make_task, store_state


class TestLastCompletedPeriod:
    """Tests for period boundaries"""

    def test_daily_is_yesterday(self, today, yesterday):
        assert last_completed_period("daily", today) == (yesterday, yesterday, "yesterday")

    def test_weekly_is_last_monday_to_sunday(self, today):
        start, end, name = last_completed_period("weekly", today)
        assert start == date(2024, 6, 3)
        assert end == date(2024, 6, 9)
        assert name == "last week (Jun 3 - Jun 9)"

    def test_monthly_is_last_calendar_month(self):
        start, end, name = last_completed_period("monthly", date(2024, 3, 15))
        assert start == date(2024, 2, 1)
        assert end == date(2024, 2, 29)
        assert name == "last month (February 2024)"

    def test_monthly_across_year_boundary(self):
        start, end, _ = last_completed_period("monthly", date(2024, 1, 1))
        assert (start, end) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_period_key(self):
        assert period_key("weekly", date(2024, 6, 9)) == "weekly:2024-06-09"


def _reading_task(**fields):
    defaults = dict(goal_value=10, goal_interval="daily", goal_completion_bonus_percentage=50)
    defaults.update(fields)
    return make_task("reading", "Reading", **defaults)


class TestEvaluateGoal:
    """Tests for recurring goal evaluation"""

    def test_task_without_goal_returns_none(self, db_session, user_id, today):
        store_state(db_session)
        assert GoalService(db_session).evaluate_last_completed_period(user_id, "work", today) is None

    def test_missing_task_returns_none(self, db_session, user_id, today):
        store_state(db_session)
        assert GoalService(db_session).evaluate_last_completed_period(user_id, "nope", today) is None

    def test_met_goal_awards_bonus_of_target(self, db_session, user_id, today, yesterday):
        """Bonus is a percentage of the target, not of the actual value"""
        store_state(
            db_session,
            task_definitions=[_reading_task()],
            records=[make_record(yesterday, 25, "reading")],
        )
        result = GoalService(db_session).evaluate_last_completed_period(user_id, "reading", today)

        assert result.met is True
        assert result.actual == 25
        assert result.bonus_awarded == 5
        assert result.already_evaluated is False
        assert GoalService(db_session).state_repo.load(db_session, user_id).bonus_points == 5

    def test_unmet_goal_awards_nothing(self, db_session, user_id, today, yesterday):
        store_state(
            db_session,
            task_definitions=[_reading_task()],
            records=[make_record(yesterday, 3, "reading"), make_record(today, 50, "reading")],
        )
        result = GoalService(db_session).evaluate_last_completed_period(user_id, "reading", today)

        assert result.met is False
        assert result.actual == 3
        assert result.bonus_awarded is None

    def test_no_more_than_goal(self, db_session, user_id, today, yesterday):
        store_state(
            db_session,
            task_definitions=[_reading_task(goal_type="no_more_than", goal_value=5)],
            records=[make_record(yesterday, 4, "reading")],
        )
        result = GoalService(db_session).evaluate_last_completed_period(user_id, "reading", today)
        assert result.met is True
        # round(5 * 50 / 100) rounds half up
        assert result.bonus_awarded == 3

    def test_second_evaluation_is_a_no_op(self, db_session, user_id, today, yesterday):
        store_state(
            db_session,
            task_definitions=[_reading_task()],
            records=[make_record(yesterday, 25, "reading")],
        )
        service = GoalService(db_session)

        first = service.evaluate_last_completed_period(user_id, "reading", today)
        second = service.evaluate_last_completed_period(user_id, "reading", today)

        assert first.bonus_awarded == 5
        assert second.already_evaluated is True
        assert second.met is True
        assert second.bonus_awarded is None
        state = service.state_repo.load(db_session, user_id)
        assert state.bonus_points == 5
        assert state.settled_goal_periods == {"reading": {f"daily:{yesterday.isoformat()}": True}}

    def test_next_period_is_evaluated_separately(self, db_session, user_id, today, yesterday):
        store_state(
            db_session,
            task_definitions=[_reading_task()],
            records=[make_record(yesterday, 25, "reading"), make_record(today, 30, "reading")],
        )
        service = GoalService(db_session)

        service.evaluate_last_completed_period(user_id, "reading", today)
        tomorrow_check = service.evaluate_last_completed_period(user_id, "reading", today + timedelta(days=1))

        assert tomorrow_check.already_evaluated is False
        assert tomorrow_check.bonus_awarded == 5
        assert service.state_repo.load(db_session, user_id).bonus_points == 10

    def test_is_goal_met_for_last_period(self, db_session, user_id, today, yesterday):
        store_state(
            db_session,
            task_definitions=[_reading_task()],
            records=[make_record(yesterday, 25, "reading")],
        )
        service = GoalService(db_session)
        assert service.is_goal_met_for_last_period(user_id, "reading", today) is False

        service.evaluate_last_completed_period(user_id, "reading", today)
        assert service.is_goal_met_for_last_period(user_id, "reading", today) is True

    def test_goal_progress_for_current_week(self, db_session, user_id, today):
        monday = today - timedelta(days=today.weekday())
        store_state(
            db_session,
            task_definitions=[_reading_task(goal_interval="weekly", goal_value=20)],
            records=[make_record(monday, 5, "reading"), make_record(today, 5, "reading")],
        )
        progress = GoalService(db_session).goal_progress(user_id, "reading", today)

        assert progress.start_date == monday
        assert progress.actual == 10
        assert progress.percentage == 50


class TestHighGoals:
    """Tests for high goal commands and progress"""

    def _create(self, db_session, user_id, **fields):
        data = dict(
            name="Read 100 pages",
            task_id="reading",
            target_value=100,
            start_date=date(2024, 6, 1),
            end_date=date(2024, 6, 30),
        )
        data.update(fields)
        return GoalService(db_session).create_high_goal(user_id, HighGoalCreate(**data))

    def test_progress_is_live_sum_capped_at_100(self, db_session, user_id):
        store_state(db_session, records=[
            make_record(date(2024, 6, 2), 30, "reading"),
            make_record(date(2024, 5, 31), 500, "reading"),
        ])
        goal = self._create(db_session, user_id)
        service = GoalService(db_session)

        progress = service.high_goal_progress(user_id, goal.id)
        assert progress.progress == 30
        assert progress.percentage == 30

        self._create(db_session, user_id, name="Tiny", target_value=10)
        percentages = [p.percentage for p in service.all_high_goal_progress(user_id)]
        assert percentages == [30, 100]

    def test_unknown_task_rejected(self, db_session, user_id):
        with pytest.raises(ValidationException):
            self._create(db_session, user_id, task_id="missing")

    def test_end_before_start_rejected(self, db_session, user_id):
        with pytest.raises(ValidationException):
            self._create(db_session, user_id, end_date=date(2024, 5, 1))

    def test_non_positive_target_rejected(self, db_session, user_id):
        with pytest.raises(ValidationException):
            self._create(db_session, user_id, target_value=0)

    def test_explicit_null_leaves_field_unchanged(self, db_session, user_id):
        goal = self._create(db_session, user_id)
        updated = GoalService(db_session).update_high_goal(
            user_id, goal.id, HighGoalUpdate(target_value=None, end_date=None, name="Read more")
        )

        assert updated.target_value == 100
        assert updated.end_date == goal.end_date
        assert updated.name == "Read more"

    def test_update_and_delete(self, db_session, user_id):
        goal = self._create(db_session, user_id)
        service = GoalService(db_session)

        updated = service.update_high_goal(user_id, goal.id, HighGoalUpdate(target_value=200))
        assert updated.target_value == 200
        assert updated.name == goal.name

        service.delete_high_goal(user_id, goal.id)
        assert service.list_high_goals(user_id) == []
        with pytest.raises(HighGoalNotFoundException):
            service.high_goal_progress(user_id, goal.id)
