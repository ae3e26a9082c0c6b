"""
Tests for TodoService (pacts).
"""
import pytest
from datetime import date, datetime

from sigil.exceptions import TodoNotFoundException, ValidationException
from sigil.schemas import TodoCreate, TodoUpdate, UserSettings
from sigil.services.todo_service import TodoService
from sigil.tests.conftest import created_on, store_state


class TestTodoService:
    """Tests for pact commands"""

    def test_newest_first(self, db_session, user_id, today):
        service = TodoService(db_session)
        service.add_todo(user_id, TodoCreate(text="first"), now=created_on(today))
        service.add_todo(user_id, TodoCreate(text="second"), now=created_on(today))

        assert [t.text for t in service.list_todos(user_id)] == ["second", "first"]

    def test_blank_text_rejected(self, db_session, user_id):
        with pytest.raises(ValidationException):
            TodoService(db_session).add_todo(user_id, TodoCreate(text="   "))

    def test_zero_penalty_is_no_penalty(self, db_session, user_id, today):
        item = TodoService(db_session).add_todo(
            user_id, TodoCreate(text="stretch", due_date=today, penalty=0), now=created_on(today)
        )
        assert item.penalty is None

    def test_toggle_same_day(self, db_session, user_id, today):
        service = TodoService(db_session)
        item = service.add_todo(user_id, TodoCreate(text="run"), now=created_on(today))

        assert service.toggle_todo(user_id, item.id, today).completed is True
        assert service.toggle_todo(user_id, item.id, today).completed is False

    def test_update_text(self, db_session, user_id, today):
        service = TodoService(db_session)
        item = service.add_todo(user_id, TodoCreate(text="run"), now=created_on(today))

        updated = service.update_todo(user_id, item.id, TodoUpdate(text="  run 5k "), today)
        assert updated.text == "run 5k"

    def test_older_pacts_are_locked(self, db_session, user_id, today, yesterday):
        service = TodoService(db_session)
        item = service.add_todo(user_id, TodoCreate(text="read"), now=created_on(yesterday))

        assert service.update_todo(user_id, item.id, TodoUpdate(completed=True), today) is None
        assert service.toggle_todo(user_id, item.id, today) is None
        assert service.delete_todo(user_id, item.id, today) is False
        assert service.list_todos(user_id)[0].completed is False

    def test_delete_same_day(self, db_session, user_id, today):
        service = TodoService(db_session)
        item = service.add_todo(user_id, TodoCreate(text="read"), now=created_on(today))

        assert service.delete_todo(user_id, item.id, today) is True
        assert service.list_todos(user_id) == []

    def test_missing_pact(self, db_session, user_id):
        with pytest.raises(TodoNotFoundException):
            TodoService(db_session).delete_todo(user_id, "missing", date(2024, 6, 14))

    def test_day_start_keeps_new_pact_mutable(self, db_session, user_id, today, yesterday):
        """Before the day start, a new pact belongs to the previous effective day"""
        store_state(db_session, settings=UserSettings(day_start_enabled=True, day_start_time="23:59"))
        service = TodoService(db_session)
        item = service.add_todo(user_id, TodoCreate(text="late night"), now=datetime(2024, 6, 14, 10, 0))

        assert service.toggle_todo(user_id, item.id, yesterday).completed is True
        assert service.toggle_todo(user_id, item.id, today) is None
        assert service.delete_todo(user_id, item.id, yesterday) is True
