"""
Pact HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from sigil.auth import verify_api_key
from sigil.database import get_db
from sigil.schemas import TodoCreate, TodoItem, TodoUpdate
from sigil.services.todo_service import TodoService

router = APIRouter(prefix="/api/users/{user_id}/todos", tags=["todos"],
                   dependencies=[Depends(verify_api_key)])

LOCKED_DETAIL = "Only pacts created today can be changed"


@router.get("", response_model=List[TodoItem])
def list_todos(user_id: str, db: Session = Depends(get_db)):
    return TodoService(db).list_todos(user_id)


@router.post("", response_model=TodoItem, status_code=status.HTTP_201_CREATED)
def add_todo(user_id: str, todo: TodoCreate, db: Session = Depends(get_db)):
    return TodoService(db).add_todo(user_id, todo)


@router.put("/{todo_id}", response_model=TodoItem)
def update_todo(user_id: str, todo_id: str, todo: TodoUpdate, db: Session = Depends(get_db)):
    item = TodoService(db).update_todo(user_id, todo_id, todo)
    if item is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=LOCKED_DETAIL)
    return item


@router.post("/{todo_id}/toggle", response_model=TodoItem)
def toggle_todo(user_id: str, todo_id: str, db: Session = Depends(get_db)):
    item = TodoService(db).toggle_todo(user_id, todo_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=LOCKED_DETAIL)
    return item


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(user_id: str, todo_id: str, db: Session = Depends(get_db)):
    if not TodoService(db).delete_todo(user_id, todo_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=LOCKED_DETAIL)
