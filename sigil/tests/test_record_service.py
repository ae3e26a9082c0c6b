"""
Tests for record and task definition commands.
"""
import pytest
from datetime import date

from sigil.exceptions import RecordNotFoundException, TaskNotFoundException, ValidationException
from sigil.schemas import (
    RecordCreate, RecordUpdate, TaskDefinitionCreate, TaskDefinitionUpdate,
)
from sigil.services.record_service import RecordService, TaskDefinitionService
from sigil.tests.conftest import make_record, store_state


class TestRecords:
    """Tests for record commands"""

    def test_add_record_keeps_date_order(self, db_session, user_id, today, yesterday):
        service = RecordService(db_session)
        service.add_record(user_id, RecordCreate(date=today, value=3, task_type="work"))
        service.add_record(user_id, RecordCreate(date=yesterday, value=2))

        records = service.list_records(user_id)
        assert [r.date for r in records] == [yesterday, today]
        assert records[0].task_type is None

    def test_unknown_task_rejected(self, db_session, user_id, today):
        with pytest.raises(ValidationException):
            RecordService(db_session).add_record(user_id, RecordCreate(date=today, value=1, task_type="ghost"))

    def test_update_record_date_and_value(self, db_session, user_id, today, yesterday):
        store_state(db_session, records=[make_record(today, 5, "work", "r1")])
        service = RecordService(db_session)

        updated = service.update_record(user_id, "r1", RecordUpdate(date=yesterday, value=8))

        assert updated.date == yesterday
        assert updated.value == 8
        assert updated.task_type == "work"

    def test_list_filters(self, db_session, user_id, today, yesterday):
        store_state(db_session, records=[
            make_record(yesterday, 1, "work"),
            make_record(today, 2, "work"),
            make_record(today, 3, "exercise"),
        ])
        service = RecordService(db_session)

        assert len(service.list_records(user_id, start=today)) == 2
        assert [r.value for r in service.list_records(user_id, task_id="work", end=yesterday)] == [1]

    def test_delete_missing_record(self, db_session, user_id):
        with pytest.raises(RecordNotFoundException):
            RecordService(db_session).delete_record(user_id, "missing")


class TestTaskDefinitions:
    """Tests for task definition validation and lifecycle"""

    def test_defaults_are_seeded(self, db_session, user_id):
        names = [t.name for t in TaskDefinitionService(db_session).list_tasks(user_id)]
        assert names == ["Work", "Exercise", "Learning", "Personal", "Reading", "Other"]

    def test_duplicate_name_is_case_insensitive(self, db_session, user_id):
        with pytest.raises(ValidationException) as exc_info:
            TaskDefinitionService(db_session).add_task(user_id, TaskDefinitionCreate(name=" work "))
        assert exc_info.value.field == "name"

    @pytest.mark.parametrize("thresholds", [[1, 2, 3], [0, 1, 2, 3], [1, 3, 2, 4], [1, 1, 2, 3]])
    def test_bad_thresholds_rejected(self, db_session, user_id, thresholds):
        data = TaskDefinitionCreate(name="Piano", intensity_thresholds=thresholds)
        with pytest.raises(ValidationException):
            TaskDefinitionService(db_session).add_task(user_id, data)

    def test_weekly_task_needs_count(self, db_session, user_id):
        service = TaskDefinitionService(db_session)
        with pytest.raises(ValidationException):
            service.add_task(user_id, TaskDefinitionCreate(name="Gym", frequency_type="weekly"))
        with pytest.raises(ValidationException):
            service.add_task(user_id, TaskDefinitionCreate(name="Gym", frequency_type="weekly", frequency_count=8))

    def test_daily_task_drops_count_and_zero_goal(self, db_session, user_id):
        task = TaskDefinitionService(db_session).add_task(user_id, TaskDefinitionCreate(
            name="Piano", frequency_count=3, goal_value=0, goal_interval="weekly",
        ))
        assert task.frequency_count is None
        assert task.goal_value is None
        assert task.goal is None

    def test_goal_requires_interval(self, db_session, user_id):
        with pytest.raises(ValidationException):
            TaskDefinitionService(db_session).add_task(user_id, TaskDefinitionCreate(name="Piano", goal_value=10))

    def test_update_task(self, db_session, user_id):
        service = TaskDefinitionService(db_session)
        updated = service.update_task(user_id, "work", TaskDefinitionUpdate(goal_value=5, goal_interval="daily"))

        assert updated.goal.target == 5
        assert updated.name == "Work"
        assert service.get_task(user_id, "work").goal_interval == "daily"

    def test_explicit_null_keeps_goal(self, db_session, user_id):
        service = TaskDefinitionService(db_session)
        service.update_task(user_id, "work", TaskDefinitionUpdate(goal_value=5, goal_interval="daily"))

        updated = service.update_task(user_id, "work", TaskDefinitionUpdate(goal_value=None, color="red"))

        assert updated.goal_value == 5
        assert updated.color == "red"

    def test_delete_task_unassigns_records(self, db_session, user_id, today):
        store_state(
            db_session,
            records=[make_record(today, 4, "reading"), make_record(today, 2, "work")],
            settled_goal_periods={"reading": {"daily:2024-06-13": True}},
        )
        service = TaskDefinitionService(db_session)

        service.delete_task(user_id, "reading")

        state = service.state_repo.load(db_session, user_id)
        assert [r.task_type for r in state.records] == [None, "work"]
        assert sum(r.value for r in state.records) == 6
        assert "reading" not in state.settled_goal_periods
        with pytest.raises(TaskNotFoundException):
            service.get_task(user_id, "reading")

    def test_missing_task(self, db_session, user_id):
        with pytest.raises(TaskNotFoundException):
            TaskDefinitionService(db_session).update_task(user_id, "ghost", TaskDefinitionUpdate(name="Ghost"))
