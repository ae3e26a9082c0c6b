"""
Constellation HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import Constellation, UnlockResult
from sigil.services.skill_service import SkillService

router = APIRouter(prefix="/api/users/{user_id}", tags=["skills"],
                   dependencies=[Depends(verify_api_key)])


@router.get("/constellations", response_model=List[Constellation])
def list_constellations(user_id: str, db: Session = Depends(get_db)):
    """Every constellation with node unlock state and available points."""
    return SkillService(db).get_constellations(user_id)


@router.get("/skills/points/{task_id}")
def get_available_points(user_id: str, task_id: str, db: Session = Depends(get_db)):
    return {"taskId": task_id, "availablePoints": SkillService(db).get_available_points(user_id, task_id)}


@router.post("/skills/{skill_id}/unlock", response_model=UnlockResult)
def unlock_skill(user_id: str, skill_id: str, db: Session = Depends(get_db)):
    """Unlock a node; 409 if it is already unlocked or points are short."""
    result = SkillService(db).unlock_node(user_id, skill_id)
    if not result.unlocked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Skill {skill_id} is already unlocked or not enough points are available"
        )
    return result
