"""
Record HTTP routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import RecordCreate, RecordEntry, RecordUpdate
from sigil.services.record_service import RecordService

router = APIRouter(prefix="/api/users/{user_id}/records", tags=["records"],
                   dependencies=[Depends(verify_api_key)])


@router.get("", response_model=List[RecordEntry])
def list_records(
    user_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    task_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """List records, optionally filtered by date range and task."""
    return RecordService(db).list_records(user_id, start, end, task_id)


@router.post("", response_model=RecordEntry, status_code=status.HTTP_201_CREATED)
def add_record(user_id: str, record: RecordCreate, db: Session = Depends(get_db)):
    """Log a record."""
    return RecordService(db).add_record(user_id, record)


@router.put("/{record_id}", response_model=RecordEntry)
def update_record(user_id: str, record_id: str, record: RecordUpdate, db: Session = Depends(get_db)):
    return RecordService(db).update_record(user_id, record_id, record)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(user_id: str, record_id: str, db: Session = Depends(get_db)):
    RecordService(db).delete_record(user_id, record_id)
