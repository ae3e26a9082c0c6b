"""
Friend list and task comparison.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.exceptions import FriendNotFoundException, ValidationException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import ComparisonEntry
from sigil.services.aggregation_service import aggregate_sum, lifetime_sum
from sigil.services.date_service import DateService

logger = logging.getLogger("sigil.social")


class ComparisonService:
    """Service for friends and side-by-side task totals"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def list_friends(self, user_id: str) -> List[str]:
        return self.state_repo.load(self.db, user_id).friends

    def add_friend(self, user_id: str, friend_id: str) -> List[str]:
        if friend_id == user_id:
            raise ValidationException("friendId", "cannot add yourself")
        if not self.state_repo.exists(self.db, friend_id):
            raise ValidationException("friendId", f"user {friend_id} does not exist")

        state = self.state_repo.load(self.db, user_id, for_update=True)
        if friend_id not in state.friends:
            state.friends.append(friend_id)
            self.state_repo.save_fields(self.db, user_id, state, ["friends"])
            logger.info(f"User {user_id}: added friend {friend_id}")
        return state.friends

    def remove_friend(self, user_id: str, friend_id: str) -> List[str]:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        if friend_id not in state.friends:
            raise FriendNotFoundException(friend_id)
        state.friends.remove(friend_id)
        self.state_repo.save_fields(self.db, user_id, state, ["friends"])
        return state.friends

    def compare(self, user_id: str, friend_id: str, days: Optional[int] = None,
                today: Optional[date] = None) -> List[ComparisonEntry]:
        """
        Totals per task for both users, over the last `days` days or all time.
        Tasks of either user are included, matched by task id.
        """
        state = self.state_repo.load(self.db, user_id)
        if friend_id not in state.friends:
            raise FriendNotFoundException(friend_id)
        friend = self.state_repo.load(self.db, friend_id)

        today = today or DateService.get_effective_date(state.settings)
        start = today - timedelta(days=days - 1) if days else None

        def total(records, task_id):
            if start is None:
                return lifetime_sum(records, task_id)
            return aggregate_sum(records, start, today, task_id)

        tasks = {}
        for task in state.task_definitions + friend.task_definitions:
            tasks.setdefault(task.id, task.name)

        return [
            ComparisonEntry(
                task_name=name,
                user_value=total(state.records, task_id),
                friend_value=total(friend.records, task_id),
            )
            for task_id, name in tasks.items()
        ]
