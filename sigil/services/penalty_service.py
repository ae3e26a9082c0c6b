"""
Penalty and dare service.
Detects broken streaks and overdue pacts, deducts their penalty once, and
resolves each breach by dare, decline or freeze crystal.
"""
import logging
import uuid
import zlib
from datetime import date, datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.constants import (
    CONSISTENCY_BREACH_DAYS, CONSISTENCY_BREACH_PENALTY, DARK_STREAK_PENALTY,
    DARE_DECLINE_PENALTY_FRACTION, DARE_POOL, STREAK_MILESTONES,
    BREACH_KIND_CONSISTENCY, BREACH_KIND_DARK_STREAK, BREACH_KIND_PACT,
    BREACH_STATUS_BREACHED, BREACH_STATUS_DARE_ACCEPTED, BREACH_STATUS_DECLINED,
    BREACH_STATUS_FROZEN,
)
from sigil.exceptions import BreachNotFoundException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import Breach, TaskDefinition, TodoItem, UserState
from sigil.services.date_service import DateService
from sigil.services.streak_service import current_streak
from sigil.utils import round_half_up

logger = logging.getLogger("sigil.penalties")


def pick_dare(key: str) -> str:
    """Dare for a breach, fixed per breach key."""
    return DARE_POOL[zlib.crc32(key.encode("utf-8")) % len(DARE_POOL)]


class PenaltyService:
    """Service for breach detection and resolution"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def _today(self, state: UserState, today: Optional[date]) -> date:
        return today or DateService.get_effective_date(state.settings)

    @staticmethod
    def _open_breach(
        state: UserState,
        kind: str,
        key: str,
        penalty: int,
        task: Optional[TaskDefinition] = None,
    ) -> Optional[Breach]:
        """Record a breach and deduct its penalty, unless (kind, key) was already handled."""
        if any(b.kind == kind and b.key == key for b in state.breaches):
            return None

        breach = Breach(
            id=str(uuid.uuid4()),
            kind=kind,
            key=key,
            task_id=task.id if task else None,
            task_name=task.name if task else None,
            penalty=penalty,
            dare=pick_dare(f"{kind}:{key}"),
            created_at=datetime.now(),
        )
        state.breaches.append(breach)
        state.bonus_points -= abs(penalty)
        return breach

    # === Detection ===

    def check_consistency(self, user_id: str, today: Optional[date] = None) -> Optional[Breach]:
        """
        Breach when no record of any kind was logged for CONSISTENCY_BREACH_DAYS days.
        Keyed by the latest record date, so one gap is penalized once.
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)
        if not state.records:
            return None

        today = self._today(state, today)
        latest = max(r.date for r in state.records)
        days_since = DateService.days_between(latest, today)
        if days_since < CONSISTENCY_BREACH_DAYS:
            return None

        breach = self._open_breach(state, BREACH_KIND_CONSISTENCY, latest.isoformat(), CONSISTENCY_BREACH_PENALTY)
        if breach is None:
            return None

        self.state_repo.save_fields(self.db, user_id, state, ["breaches", "bonus_points"])
        logger.warning(
            f"User {user_id}: consistency breach, {days_since} days since {latest}, -{CONSISTENCY_BREACH_PENALTY}"
        )
        return breach

    def check_dark_streaks(self, user_id: str, today: Optional[date] = None) -> List[Breach]:
        """Breach every dark-streak task that has no record yesterday."""
        state = self.state_repo.load(self.db, user_id, for_update=True)
        yesterday = self._today(state, today) - timedelta(days=1)
        done_yesterday = {r.task_type for r in state.records if r.date == yesterday}

        breaches = []
        for task in state.task_definitions:
            if not task.dark_streak_enabled or task.id in done_yesterday:
                continue
            breach = self._open_breach(
                state, BREACH_KIND_DARK_STREAK, f"{task.id}:{yesterday.isoformat()}", DARK_STREAK_PENALTY, task
            )
            if breach:
                breaches.append(breach)
                logger.warning(f"User {user_id}: dark streak broken for {task.name}, -{DARK_STREAK_PENALTY}")

        if breaches:
            self.state_repo.save_fields(self.db, user_id, state, ["breaches", "bonus_points"])
        return breaches

    def check_overdue_pacts(self, user_id: str, today: Optional[date] = None) -> List[Breach]:
        """Apply the penalty of every unfinished pact whose due date has passed."""
        state = self.state_repo.load(self.db, user_id, for_update=True)
        today = self._today(state, today)

        breaches = []
        for item in state.todo_items:
            if item.completed or item.penalty_applied or not item.penalty:
                continue
            if item.due_date is None or item.due_date >= today:
                continue
            item.penalty_applied = True
            breach = self._open_breach(state, BREACH_KIND_PACT, item.id, item.penalty)
            if breach:
                breaches.append(breach)
                logger.warning(f"User {user_id}: pact '{item.text}' overdue since {item.due_date}, -{item.penalty}")

        if breaches:
            self.state_repo.save_fields(self.db, user_id, state, ["breaches", "bonus_points", "todo_items"])
        return breaches

    # === Resolution ===

    def list_breaches(self, user_id: str, pending_only: bool = False) -> List[Breach]:
        breaches = self.state_repo.load(self.db, user_id).breaches
        if pending_only:
            return [b for b in breaches if b.status == BREACH_STATUS_BREACHED]
        return breaches

    def _load_pending(self, user_id: str, breach_id: str):
        state = self.state_repo.load(self.db, user_id, for_update=True)
        breach = next((b for b in state.breaches if b.id == breach_id), None)
        if breach is None:
            raise BreachNotFoundException(breach_id)
        if breach.status != BREACH_STATUS_BREACHED:
            logger.info(f"User {user_id}: breach {breach_id} already resolved ({breach.status})")
            return state, None
        return state, breach

    def accept_dare(self, user_id: str, breach_id: str, today: Optional[date] = None) -> Optional[Breach]:
        """Accept the dare: it becomes a pact due today, with no further penalty."""
        state, breach = self._load_pending(user_id, breach_id)
        if breach is None:
            return None

        state.todo_items.insert(0, TodoItem(
            id=str(uuid.uuid4()),
            text=breach.dare,
            created_at=datetime.now(),
            due_date=self._today(state, today),
            is_dare=True,
        ))
        breach.status = BREACH_STATUS_DARE_ACCEPTED
        breach.resolved_at = datetime.now()

        self.state_repo.save_fields(self.db, user_id, state, ["breaches", "todo_items"])
        logger.info(f"User {user_id}: accepted dare for breach {breach_id}")
        return breach

    def decline_dare(self, user_id: str, breach_id: str) -> Optional[Breach]:
        """Decline the dare and pay an extra fraction of the original penalty."""
        state, breach = self._load_pending(user_id, breach_id)
        if breach is None:
            return None

        extra = round_half_up(breach.penalty * DARE_DECLINE_PENALTY_FRACTION)
        state.bonus_points -= extra
        breach.status = BREACH_STATUS_DECLINED
        breach.resolved_at = datetime.now()

        self.state_repo.save_fields(self.db, user_id, state, ["breaches", "bonus_points"])
        logger.warning(f"User {user_id}: declined dare for breach {breach_id}, -{extra}")
        return breach

    def use_freeze_crystal(self, user_id: str, breach_id: str) -> Optional[Breach]:
        """Spend a freeze crystal to cancel the breach and refund its penalty."""
        state, breach = self._load_pending(user_id, breach_id)
        if breach is None:
            return None
        if state.freeze_crystals <= 0:
            logger.info(f"User {user_id}: no freeze crystals for breach {breach_id}")
            return None

        state.freeze_crystals -= 1
        state.bonus_points += abs(breach.penalty)
        breach.status = BREACH_STATUS_FROZEN
        breach.resolved_at = datetime.now()

        self.state_repo.save_fields(self.db, user_id, state, ["breaches", "bonus_points", "freeze_crystals"])
        logger.info(f"User {user_id}: froze breach {breach_id}, {state.freeze_crystals} crystals left")
        return breach

    # === Rewards ===

    def check_streak_milestones(self, user_id: str, today: Optional[date] = None) -> int:
        """
        Grant one freeze crystal per task for each streak milestone reached.
        Milestones already awarded for a task are never paid again.

        Returns:
            Number of crystals granted by this call
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)
        today = self._today(state, today)
        granted = 0

        for task in state.task_definitions:
            streak = current_streak(state.records, today, task)
            awarded = state.awarded_streak_milestones.setdefault(task.id, [])
            for milestone in STREAK_MILESTONES:
                if streak >= milestone and milestone not in awarded:
                    awarded.append(milestone)
                    state.freeze_crystals += 1
                    granted += 1
                    logger.info(f"User {user_id}: {task.name} streak reached {milestone}, +1 freeze crystal")

        if granted:
            self.state_repo.save_fields(
                self.db, user_id, state, ["awarded_streak_milestones", "freeze_crystals"]
            )
        return granted
