"""
Goal HTTP routes: recurring task goals and high goals.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import (
    GoalCheckResult, GoalProgress, HighGoal, HighGoalCreate, HighGoalProgress, HighGoalUpdate,
)
from sigil.services.goal_service import GoalService
from sigil.services.record_service import TaskDefinitionService

router = APIRouter(prefix="/api/users/{user_id}", tags=["goals"],
                   dependencies=[Depends(verify_api_key)])


@router.post("/tasks/{task_id}/goal/evaluate", response_model=Optional[GoalCheckResult])
def evaluate_goal(user_id: str, task_id: str, db: Session = Depends(get_db)):
    """
    Settle the task's goal for its last completed period.
    Returns null when the task has no goal.
    """
    # Unknown task is a 404 here; a task without a goal is a null result
    TaskDefinitionService(db).get_task(user_id, task_id)
    return GoalService(db).evaluate_last_completed_period(user_id, task_id)


@router.get("/tasks/{task_id}/goal/last-period")
def is_goal_met_for_last_period(user_id: str, task_id: str, db: Session = Depends(get_db)):
    TaskDefinitionService(db).get_task(user_id, task_id)
    return {"met": GoalService(db).is_goal_met_for_last_period(user_id, task_id)}


@router.get("/tasks/{task_id}/goal/progress", response_model=Optional[GoalProgress])
def get_goal_progress(user_id: str, task_id: str, db: Session = Depends(get_db)):
    return GoalService(db).goal_progress(user_id, task_id)


@router.get("/high-goals", response_model=List[HighGoalProgress])
def list_high_goals(user_id: str, db: Session = Depends(get_db)):
    """All high goals with live progress."""
    return GoalService(db).all_high_goal_progress(user_id)


@router.get("/high-goals/{goal_id}", response_model=HighGoalProgress)
def get_high_goal(user_id: str, goal_id: str, db: Session = Depends(get_db)):
    return GoalService(db).high_goal_progress(user_id, goal_id)


@router.post("/high-goals", response_model=HighGoal, status_code=status.HTTP_201_CREATED)
def create_high_goal(user_id: str, goal: HighGoalCreate, db: Session = Depends(get_db)):
    return GoalService(db).create_high_goal(user_id, goal)


@router.put("/high-goals/{goal_id}", response_model=HighGoal)
def update_high_goal(user_id: str, goal_id: str, goal: HighGoalUpdate, db: Session = Depends(get_db)):
    return GoalService(db).update_high_goal(user_id, goal_id, goal)


@router.delete("/high-goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_high_goal(user_id: str, goal_id: str, db: Session = Depends(get_db)):
    GoalService(db).delete_high_goal(user_id, goal_id)
