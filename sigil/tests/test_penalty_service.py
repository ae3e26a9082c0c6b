"""
Tests for PenaltyService.

Tests cover:
1. Breach detection (consistency, dark streak, overdue pacts)
2. Each breach is penalized once
3. Dare accept / decline / freeze resolution
4. Streak milestone freeze crystals
"""
import pytest
from datetime import timedelta

from sigil.constants import (
    CONSISTENCY_BREACH_PENALTY, DARE_POOL, DARK_STREAK_PENALTY,
)
from sigil.exceptions import BreachNotFoundException
from sigil.schemas import TodoItem
from sigil.services.penalty_service import PenaltyService, pick_dare
from sigil.tests.conftest import (
    consecutive_records, created_on, make_record, make_task, store_state,
)


def _open_consistency_breach(db_session, user_id, today, **fields):
    store_state(db_session, records=[make_record(today - timedelta(days=3), 5, "work")], **fields)
    service = PenaltyService(db_session)
    return service, service.check_consistency(user_id, today)


class TestConsistencyBreach:
    """Tests for breaches caused by days without any record"""

    def test_no_records_no_breach(self, db_session, user_id, today):
        store_state(db_session)
        assert PenaltyService(db_session).check_consistency(user_id, today) is None

    def test_recent_record_no_breach(self, db_session, user_id, today, yesterday):
        store_state(db_session, records=[make_record(yesterday, 1)])
        assert PenaltyService(db_session).check_consistency(user_id, today) is None

    def test_gap_opens_breach_once(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today)

        assert breach is not None
        assert breach.kind == "consistency"
        assert breach.status == "breached"
        assert breach.penalty == CONSISTENCY_BREACH_PENALTY
        assert breach.dare in DARE_POOL

        # Detection runs again the next day for the same gap
        assert service.check_consistency(user_id, today + timedelta(days=1)) is None

        state = service.state_repo.load(db_session, user_id)
        assert len(state.breaches) == 1
        assert state.bonus_points == -CONSISTENCY_BREACH_PENALTY

    def test_dare_is_stable_per_key(self):
        assert pick_dare("consistency:2024-06-11") == pick_dare("consistency:2024-06-11")


class TestDarkStreakBreach:
    """Tests for dark streak tasks"""

    def test_missing_yesterday_breaks_dark_streak(self, db_session, user_id, today, yesterday):
        tasks = [
            make_task("meditate", "Meditate", dark_streak_enabled=True),
            make_task("gym", "Gym", dark_streak_enabled=True),
            make_task("work", "Work"),
        ]
        store_state(db_session, task_definitions=tasks, records=[make_record(yesterday, 1, "gym")])
        service = PenaltyService(db_session)

        breaches = service.check_dark_streaks(user_id, today)
        again = service.check_dark_streaks(user_id, today)

        assert [b.task_id for b in breaches] == ["meditate"]
        assert breaches[0].key == f"meditate:{yesterday.isoformat()}"
        assert again == []
        assert service.state_repo.load(db_session, user_id).bonus_points == -DARK_STREAK_PENALTY


class TestOverduePacts:
    """Tests for pact penalties"""

    def _pact(self, pact_id, due, penalty=40, completed=False, created=None):
        return TodoItem(
            id=pact_id, text=f"pact {pact_id}", created_at=created_on(created or due),
            due_date=due, penalty=penalty, completed=completed,
        )

    def test_overdue_pact_penalized_once(self, db_session, user_id, today, yesterday):
        store_state(db_session, todo_items=[
            self._pact("late", yesterday),
            self._pact("done", yesterday, completed=True),
            self._pact("due-today", today),
            self._pact("free", yesterday, penalty=None),
        ])
        service = PenaltyService(db_session)

        breaches = service.check_overdue_pacts(user_id, today)
        again = service.check_overdue_pacts(user_id, today)

        assert [b.key for b in breaches] == ["late"]
        assert again == []
        state = service.state_repo.load(db_session, user_id)
        assert state.bonus_points == -40
        late = next(item for item in state.todo_items if item.id == "late")
        assert late.penalty_applied is True

    def test_pact_due_today_is_overdue_tomorrow(self, db_session, user_id, today):
        store_state(db_session, todo_items=[self._pact("due-today", today)])
        service = PenaltyService(db_session)

        assert service.check_overdue_pacts(user_id, today) == []
        assert [b.key for b in service.check_overdue_pacts(user_id, today + timedelta(days=1))] == ["due-today"]


class TestBreachResolution:
    """Tests for dare accept, decline and freeze"""

    def test_accept_creates_dare_pact(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today)

        resolved = service.accept_dare(user_id, breach.id, today)

        assert resolved.status == "dare_accepted"
        assert resolved.resolved_at is not None
        state = service.state_repo.load(db_session, user_id)
        assert state.todo_items[0].is_dare is True
        assert state.todo_items[0].text == breach.dare
        assert state.todo_items[0].due_date == today
        assert state.bonus_points == -CONSISTENCY_BREACH_PENALTY

    def test_decline_costs_half_again(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today)

        resolved = service.decline_dare(user_id, breach.id)

        assert resolved.status == "declined"
        assert service.state_repo.load(db_session, user_id).bonus_points == -150

    def test_freeze_refunds_penalty(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today, freeze_crystals=2)

        resolved = service.use_freeze_crystal(user_id, breach.id)

        assert resolved.status == "frozen"
        state = service.state_repo.load(db_session, user_id)
        assert state.freeze_crystals == 1
        assert state.bonus_points == 0

    def test_freeze_without_crystals(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today)

        assert service.use_freeze_crystal(user_id, breach.id) is None
        assert service.list_breaches(user_id, pending_only=True)[0].id == breach.id

    def test_resolved_breach_cannot_be_resolved_again(self, db_session, user_id, today):
        service, breach = _open_consistency_breach(db_session, user_id, today)
        service.decline_dare(user_id, breach.id)

        assert service.accept_dare(user_id, breach.id, today) is None
        assert service.decline_dare(user_id, breach.id) is None
        assert service.state_repo.load(db_session, user_id).bonus_points == -150
        assert service.list_breaches(user_id, pending_only=True) == []

    def test_unknown_breach(self, db_session, user_id):
        with pytest.raises(BreachNotFoundException):
            PenaltyService(db_session).decline_dare(user_id, "missing")


class TestStreakMilestones:
    """Tests for freeze crystal rewards"""

    def test_milestones_granted_once(self, db_session, user_id, today):
        store_state(db_session, records=consecutive_records(today, 14, "work"))
        service = PenaltyService(db_session)

        assert service.check_streak_milestones(user_id, today) == 2
        assert service.check_streak_milestones(user_id, today) == 0

        state = service.state_repo.load(db_session, user_id)
        assert state.freeze_crystals == 2
        assert state.awarded_streak_milestones["work"] == [7, 14]
