"""
Friend HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import ComparisonEntry, FriendAdd
from sigil.services.comparison_service import ComparisonService

router = APIRouter(prefix="/api/users/{user_id}/friends", tags=["social"],
                   dependencies=[Depends(verify_api_key)])


@router.get("", response_model=List[str])
def list_friends(user_id: str, db: Session = Depends(get_db)):
    return ComparisonService(db).list_friends(user_id)


@router.post("", response_model=List[str])
def add_friend(user_id: str, body: FriendAdd, db: Session = Depends(get_db)):
    return ComparisonService(db).add_friend(user_id, body.friend_id)


@router.delete("/{friend_id}", response_model=List[str])
def remove_friend(user_id: str, friend_id: str, db: Session = Depends(get_db)):
    return ComparisonService(db).remove_friend(user_id, friend_id)


@router.get("/{friend_id}/comparison", response_model=List[ComparisonEntry])
def compare_with_friend(
    user_id: str,
    friend_id: str,
    days: Optional[int] = Query(None, ge=1, le=3650),
    db: Session = Depends(get_db)
):
    """Task totals side by side; all time unless `days` is given."""
    return ComparisonService(db).compare(user_id, friend_id, days)
