"""
User state repository - Data access layer for the per-user document.
Handles loading, seeding and top-level merge writes of UserDocument rows.
"""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from sigil.constants import DEFAULT_TASK_DEFINITIONS
from sigil.models import UserDocument
from sigil.schemas import TaskDefinition, UserState
from sigil.utils import strip_absent


class UserStateRepository:
    """Repository for UserDocument data access"""

    @staticmethod
    def get_row(db: Session, user_id: str, for_update: bool = False) -> Optional[UserDocument]:
        query = db.query(UserDocument).filter(UserDocument.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def load(db: Session, user_id: str, for_update: bool = False) -> UserState:
        """
        Load a user's state.

        A user without a stored document gets a fresh state seeded with the
        default task definitions. Nothing is written until save() is called.

        Args:
            db: Database session
            user_id: Owner of the document
            for_update: Lock the row for the rest of the transaction

        Returns:
            Validated UserState
        """
        row = UserStateRepository.get_row(db, user_id, for_update=for_update)
        if row is None:
            return UserStateRepository.seed_state()
        return UserState.model_validate(row.data or {})

    @staticmethod
    def seed_state() -> UserState:
        return UserState(
            task_definitions=[TaskDefinition(**task) for task in DEFAULT_TASK_DEFINITIONS]
        )

    @staticmethod
    def save(db: Session, user_id: str, partial: dict) -> dict:
        """
        Merge a partial document into the stored one and commit.

        Top-level keys of `partial` replace the stored values; other stored
        keys are left alone. Absent values are stripped first (see strip_absent).

        Returns:
            The full stored document after the merge
        """
        cleaned = strip_absent(partial)

        row = UserStateRepository.get_row(db, user_id)
        if row is None:
            row = UserDocument(
                user_id=user_id,
                data=UserStateRepository.dump(UserStateRepository.seed_state())
            )
            db.add(row)

        merged = dict(row.data or {})
        merged.update(cleaned)
        row.data = merged

        db.commit()
        db.refresh(row)
        return row.data

    @staticmethod
    def save_fields(db: Session, user_id: str, state: UserState, fields: Iterable[str]) -> dict:
        """Persist the named top-level fields of `state` (snake_case names)."""
        return UserStateRepository.save(db, user_id, UserStateRepository.dump(state, fields))

    @staticmethod
    def dump(state: UserState, fields: Optional[Iterable[str]] = None) -> dict:
        include = set(fields) if fields is not None else None
        return strip_absent(state.model_dump(by_alias=True, mode="json", include=include))

    @staticmethod
    def list_user_ids(db: Session) -> List[str]:
        return [row.user_id for row in db.query(UserDocument.user_id).order_by(UserDocument.user_id).all()]

    @staticmethod
    def exists(db: Session, user_id: str) -> bool:
        return UserStateRepository.get_row(db, user_id) is not None
