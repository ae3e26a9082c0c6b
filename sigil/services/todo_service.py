"""
Pact (to-do item) service.
Pacts can carry a penalty that is applied once if they are still open after their due date.
Only pacts created on the current day can be changed or removed.
"""
import logging
import uuid
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.exceptions import TodoNotFoundException, ValidationException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import TodoCreate, TodoItem, TodoUpdate, UserState
from sigil.services.date_service import DateService

logger = logging.getLogger("sigil.todos")


class TodoService:
    """Service for pacts"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def list_todos(self, user_id: str) -> List[TodoItem]:
        return self.state_repo.load(self.db, user_id).todo_items

    def add_todo(self, user_id: str, data: TodoCreate, now: Optional[datetime] = None) -> TodoItem:
        """Create a pact; newest pacts come first."""
        text = data.text.strip()
        if not text:
            raise ValidationException("text", "cannot be blank")

        state = self.state_repo.load(self.db, user_id, for_update=True)
        item = TodoItem(
            id=str(uuid.uuid4()),
            text=text,
            created_at=now or datetime.now(),
            due_date=data.due_date,
            penalty=data.penalty or None,
        )
        state.todo_items.insert(0, item)
        self.state_repo.save_fields(self.db, user_id, state, ["todo_items"])
        logger.info(f"User {user_id}: new pact '{text}' due {data.due_date}")
        return item

    def update_todo(self, user_id: str, todo_id: str, data: TodoUpdate,
                    today: Optional[date] = None) -> Optional[TodoItem]:
        """Returns None when the pact is locked (not created today)."""
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find(state, todo_id)
        if not self._is_mutable(state, state.todo_items[index], today):
            return None

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "text" in changes:
            changes["text"] = changes["text"].strip()
            if not changes["text"]:
                raise ValidationException("text", "cannot be blank")

        item = state.todo_items[index].model_copy(update=changes)
        state.todo_items[index] = item
        self.state_repo.save_fields(self.db, user_id, state, ["todo_items"])
        return item

    def toggle_todo(self, user_id: str, todo_id: str, today: Optional[date] = None) -> Optional[TodoItem]:
        state = self.state_repo.load(self.db, user_id)
        item = state.todo_items[self._find(state, todo_id)]
        return self.update_todo(user_id, todo_id, TodoUpdate(completed=not item.completed), today)

    def delete_todo(self, user_id: str, todo_id: str, today: Optional[date] = None) -> bool:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find(state, todo_id)
        if not self._is_mutable(state, state.todo_items[index], today):
            return False

        del state.todo_items[index]
        self.state_repo.save_fields(self.db, user_id, state, ["todo_items"])
        return True

    @staticmethod
    def _is_mutable(state: UserState, item: TodoItem, today: Optional[date]) -> bool:
        today = today or DateService.get_effective_date(state.settings)
        return DateService.get_effective_date(state.settings, now=item.created_at) == today

    @staticmethod
    def _find(state: UserState, todo_id: str) -> int:
        for index, item in enumerate(state.todo_items):
            if item.id == todo_id:
                return index
        raise TodoNotFoundException(todo_id)
