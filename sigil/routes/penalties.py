"""
Breach and dare HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import Breach
from sigil.services.penalty_service import PenaltyService

router = APIRouter(prefix="/api/users/{user_id}", tags=["penalties"],
                   dependencies=[Depends(verify_api_key)])


def _resolved_or_conflict(breach, breach_id: str) -> Breach:
    if breach is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Breach {breach_id} cannot be resolved this way"
        )
    return breach


@router.get("/breaches", response_model=List[Breach])
def list_breaches(user_id: str, pending: bool = False, db: Session = Depends(get_db)):
    return PenaltyService(db).list_breaches(user_id, pending_only=pending)


@router.post("/breaches/check", response_model=List[Breach])
def check_breaches(user_id: str, db: Session = Depends(get_db)):
    """Run all breach detectors now. Returns only the breaches opened by this call."""
    service = PenaltyService(db)
    opened = service.check_overdue_pacts(user_id)
    opened += service.check_dark_streaks(user_id)
    consistency = service.check_consistency(user_id)
    if consistency is not None:
        opened.append(consistency)
    return opened


@router.post("/breaches/{breach_id}/accept", response_model=Breach)
def accept_dare(user_id: str, breach_id: str, db: Session = Depends(get_db)):
    return _resolved_or_conflict(PenaltyService(db).accept_dare(user_id, breach_id), breach_id)


@router.post("/breaches/{breach_id}/decline", response_model=Breach)
def decline_dare(user_id: str, breach_id: str, db: Session = Depends(get_db)):
    return _resolved_or_conflict(PenaltyService(db).decline_dare(user_id, breach_id), breach_id)


@router.post("/breaches/{breach_id}/freeze", response_model=Breach)
def use_freeze_crystal(user_id: str, breach_id: str, db: Session = Depends(get_db)):
    """Cancel a breach with a freeze crystal; 409 when none are left."""
    return _resolved_or_conflict(PenaltyService(db).use_freeze_crystal(user_id, breach_id), breach_id)


@router.post("/streak-milestones/check")
def check_streak_milestones(user_id: str, db: Session = Depends(get_db)):
    return {"crystalsGranted": PenaltyService(db).check_streak_milestones(user_id)}
