"""
Per-user settings.
"""
import logging
from datetime import date
from sqlalchemy.orm import Session

from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import SettingsUpdate, UserSettings
from sigil.services.date_service import DateService

logger = logging.getLogger("sigil.settings")


class SettingsService:
    """Service for reading and changing a user's settings"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def get(self, user_id: str) -> UserSettings:
        return self.state_repo.load(self.db, user_id).settings

    def update(self, user_id: str, data: SettingsUpdate) -> UserSettings:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "day_start_time" in changes:
            # Raises InvalidTimeFormatException
            hour, minute = DateService.parse_time(changes["day_start_time"])
            changes["day_start_time"] = f"{hour:02d}:{minute:02d}"

        state = self.state_repo.load(self.db, user_id, for_update=True)
        state.settings = state.settings.model_copy(update=changes)
        self.state_repo.save_fields(self.db, user_id, state, ["settings"])
        logger.info(f"User {user_id}: settings updated {sorted(changes)}")
        return state.settings

    def get_effective_date(self, user_id: str) -> date:
        return DateService.get_effective_date(self.get(user_id))
