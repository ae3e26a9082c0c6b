"""
Task definition and streak HTTP routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import StreakInfo, TaskDefinition, TaskDefinitionCreate, TaskDefinitionUpdate
from sigil.services.record_service import TaskDefinitionService
from sigil.services.streak_service import StreakService

router = APIRouter(prefix="/api/users/{user_id}", tags=["tasks"],
                   dependencies=[Depends(verify_api_key)])


@router.get("/tasks", response_model=List[TaskDefinition])
def list_tasks(user_id: str, db: Session = Depends(get_db)):
    return TaskDefinitionService(db).list_tasks(user_id)


@router.get("/tasks/{task_id}", response_model=TaskDefinition)
def get_task(user_id: str, task_id: str, db: Session = Depends(get_db)):
    return TaskDefinitionService(db).get_task(user_id, task_id)


@router.post("/tasks", response_model=TaskDefinition, status_code=status.HTTP_201_CREATED)
def add_task(user_id: str, task: TaskDefinitionCreate, db: Session = Depends(get_db)):
    """Create a task definition."""
    return TaskDefinitionService(db).add_task(user_id, task)


@router.put("/tasks/{task_id}", response_model=TaskDefinition)
def update_task(user_id: str, task_id: str, task: TaskDefinitionUpdate, db: Session = Depends(get_db)):
    return TaskDefinitionService(db).update_task(user_id, task_id, task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(user_id: str, task_id: str, db: Session = Depends(get_db)):
    """Delete a task; its records stay, unassigned."""
    TaskDefinitionService(db).delete_task(user_id, task_id)


@router.get("/streak", response_model=StreakInfo)
def get_overall_streak(
    user_id: str,
    days: Optional[int] = Query(None, ge=0, le=3650),
    db: Session = Depends(get_db)
):
    """Streak and consistency across all records."""
    return StreakService(db).get_streak_info(user_id, None, days)


@router.get("/tasks/{task_id}/streak", response_model=StreakInfo)
def get_task_streak(
    user_id: str,
    task_id: str,
    days: Optional[int] = Query(None, ge=0, le=3650),
    db: Session = Depends(get_db)
):
    return StreakService(db).get_streak_info(user_id, task_id, days)
