"""
Record and task definition commands.
Every command validates first, then writes the changed document fields in one commit.
"""
import logging
import uuid
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.constants import DEFAULT_TASK_COLOR, FREQUENCY_WEEKLY
from sigil.exceptions import RecordNotFoundException, TaskNotFoundException, ValidationException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import (
    RecordCreate, RecordEntry, RecordUpdate, TaskDefinition, TaskDefinitionCreate,
    TaskDefinitionUpdate, UserState,
)
from sigil.services.aggregation_service import matches_task

logger = logging.getLogger("sigil.records")


class RecordService:
    """Service for logging, editing and removing records"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def list_records(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        task_id: Optional[str] = None,
    ) -> List[RecordEntry]:
        records = self.state_repo.load(self.db, user_id).records
        return [
            r for r in records
            if matches_task(r, task_id)
            and (start is None or r.date >= start)
            and (end is None or r.date <= end)
        ]

    @staticmethod
    def _check_task_reference(state: UserState, task_id: Optional[str]) -> None:
        if task_id and state.get_task(task_id) is None:
            raise ValidationException("taskType", f"task {task_id} does not exist")

    def add_record(self, user_id: str, data: RecordCreate) -> RecordEntry:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        self._check_task_reference(state, data.task_type)

        record = RecordEntry(id=str(uuid.uuid4()), **data.model_dump())
        state.records.append(record)
        state.records.sort(key=lambda r: r.date)

        self.state_repo.save_fields(self.db, user_id, state, ["records"])
        logger.info(f"User {user_id}: logged {record.value} for {record.task_type or 'unassigned'} on {record.date}")
        return record

    def update_record(self, user_id: str, record_id: str, data: RecordUpdate) -> RecordEntry:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_record(state, record_id)

        changes = data.model_dump(exclude_unset=True)
        if "day" in changes:
            changes["date"] = changes.pop("day")
        if changes.get("task_type"):
            self._check_task_reference(state, changes["task_type"])

        record = state.records[index].model_copy(update=changes)
        if record.date is None or record.value is None:
            raise ValidationException("record", "date and value cannot be cleared")
        state.records[index] = record
        state.records.sort(key=lambda r: r.date)

        self.state_repo.save_fields(self.db, user_id, state, ["records"])
        return record

    def delete_record(self, user_id: str, record_id: str) -> None:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_record(state, record_id)
        del state.records[index]
        self.state_repo.save_fields(self.db, user_id, state, ["records"])

    @staticmethod
    def _find_record(state: UserState, record_id: str) -> int:
        for index, record in enumerate(state.records):
            if record.id == record_id:
                return index
        raise RecordNotFoundException(record_id)


class TaskDefinitionService:
    """Service for user-defined task categories"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def list_tasks(self, user_id: str) -> List[TaskDefinition]:
        return self.state_repo.load(self.db, user_id).task_definitions

    def get_task(self, user_id: str, task_id: str) -> TaskDefinition:
        task = self.state_repo.load(self.db, user_id).get_task(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return task

    @staticmethod
    def normalize(task: TaskDefinition, state: UserState) -> TaskDefinition:
        """
        Validate a task definition against the rest of the state and clean it up.

        Raises:
            ValidationException: blank or duplicate name, malformed intensity
                thresholds, weekly frequency without a 1..7 count, or a goal
                without an interval
        """
        name = (task.name or "").strip()
        if not name:
            raise ValidationException("name", "cannot be blank")
        for other in state.task_definitions:
            if other.id != task.id and other.name.strip().lower() == name.lower():
                raise ValidationException("name", f"a task named '{name}' already exists")

        thresholds = task.intensity_thresholds or None
        if thresholds is not None:
            if len(thresholds) != 4:
                raise ValidationException("intensityThresholds", "exactly 4 values are required")
            if thresholds[0] <= 0 or any(b <= a for a, b in zip(thresholds, thresholds[1:])):
                raise ValidationException("intensityThresholds", "values must be positive and strictly ascending")

        frequency_count = task.frequency_count
        if task.frequency_type == FREQUENCY_WEEKLY:
            if frequency_count is None or not 1 <= frequency_count <= 7:
                raise ValidationException("frequencyCount", "weekly tasks need a count between 1 and 7")
        else:
            frequency_count = None

        goal_value, goal_interval = task.goal_value, task.goal_interval
        if goal_value is None or goal_value <= 0:
            goal_value, goal_interval = None, None
        elif goal_interval is None:
            raise ValidationException("goalInterval", "required when goalValue is set")

        return task.model_copy(update={
            "name": name,
            "color": task.color or DEFAULT_TASK_COLOR,
            "intensity_thresholds": thresholds,
            "frequency_count": frequency_count,
            "goal_value": goal_value,
            "goal_interval": goal_interval,
        })

    def add_task(self, user_id: str, data: TaskDefinitionCreate) -> TaskDefinition:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        fields = data.model_dump()
        fields["color"] = fields.get("color") or DEFAULT_TASK_COLOR
        task = self.normalize(TaskDefinition(id=str(uuid.uuid4()), **fields), state)

        state.task_definitions.append(task)
        self.state_repo.save_fields(self.db, user_id, state, ["task_definitions"])
        logger.info(f"User {user_id}: added task '{task.name}'")
        return task

    def update_task(self, user_id: str, task_id: str, data: TaskDefinitionUpdate) -> TaskDefinition:
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_task(state, task_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        updated = state.task_definitions[index].model_copy(update=changes)
        updated = self.normalize(updated, state)

        state.task_definitions[index] = updated
        self.state_repo.save_fields(self.db, user_id, state, ["task_definitions"])
        return updated

    def delete_task(self, user_id: str, task_id: str) -> None:
        """Remove a task; its records become unassigned and its settled goal periods are dropped."""
        state = self.state_repo.load(self.db, user_id, for_update=True)
        index = self._find_task(state, task_id)
        task = state.task_definitions.pop(index)

        for record in state.records:
            if record.task_type == task_id:
                record.task_type = None
        state.settled_goal_periods.pop(task_id, None)

        self.state_repo.save_fields(
            self.db, user_id, state, ["task_definitions", "records", "settled_goal_periods"]
        )
        logger.info(f"User {user_id}: deleted task '{task.name}'")

    @staticmethod
    def _find_task(state: UserState, task_id: str) -> int:
        for index, task in enumerate(state.task_definitions):
            if task.id == task_id:
                return index
        raise TaskNotFoundException(task_id)
