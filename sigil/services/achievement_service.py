"""
Achievement service.
Evaluates level, streak and skill achievements and persists newly unlocked ones.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.constants import (
    ACHIEVEMENTS, ACHIEVEMENT_CATEGORY_LEVEL, ACHIEVEMENT_CATEGORY_STREAK, ACHIEVEMENT_CATEGORY_SKILLS,
)
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import AchievementStatus, UserState
from sigil.services.date_service import DateService
from sigil.services.level_service import resolve_level
from sigil.services.streak_service import current_streak

logger = logging.getLogger("sigil.achievements")


def earned_achievement_ids(state: UserState, today: date) -> List[str]:
    """Ids of every achievement whose condition currently holds."""
    level = resolve_level(state.total_experience).current_level
    streaks = [current_streak(state.records, today)]
    streaks += [current_streak(state.records, today, task) for task in state.task_definitions]
    best_streak = max(streaks)
    skill_count = len(state.unlocked_skills)

    earned = []
    for achievement in ACHIEVEMENTS:
        category, threshold = achievement["category"], achievement["threshold"]
        if category == ACHIEVEMENT_CATEGORY_LEVEL and level >= threshold:
            earned.append(achievement["id"])
        elif category == ACHIEVEMENT_CATEGORY_STREAK and best_streak >= threshold:
            earned.append(achievement["id"])
        elif category == ACHIEVEMENT_CATEGORY_SKILLS and skill_count >= threshold:
            earned.append(achievement["id"])
    return earned


class AchievementService:
    """Service for achievement checks"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def check_achievements(self, user_id: str, today: Optional[date] = None) -> List[str]:
        """
        Unlock every achievement that is earned but not yet recorded.
        Unlocked achievements stay unlocked even if the condition lapses.

        Returns:
            Ids unlocked by this call
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)
        today = today or DateService.get_effective_date(state.settings)

        new_ids = [a for a in earned_achievement_ids(state, today) if a not in state.unlocked_achievements]
        if new_ids:
            state.unlocked_achievements.extend(new_ids)
            self.state_repo.save_fields(self.db, user_id, state, ["unlocked_achievements"])
            logger.info(f"User {user_id}: unlocked achievements {new_ids}")
        return new_ids

    def list_achievements(self, user_id: str) -> List[AchievementStatus]:
        unlocked = set(self.state_repo.load(self.db, user_id).unlocked_achievements)
        return [
            AchievementStatus(
                id=a["id"],
                name=a["name"],
                description=a["description"],
                category=a["category"],
                unlocked=a["id"] in unlocked,
            )
            for a in ACHIEVEMENTS
        ]
