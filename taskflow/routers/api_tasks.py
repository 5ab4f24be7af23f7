from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..crud.tasks import create_task, delete_task, get_task, list_tasks, update_task
from ..db.session import get_db
from ..deps.auth import CurrentUser
from ..deps.clock import get_now
from ..schemas.base import MessageOut
from ..schemas.task import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
def api_list_tasks(user: CurrentUser, db: Session = Depends(get_db)):
    return list_tasks(db, user.id)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def api_create_task(
    payload: TaskCreate, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return create_task(db, user.id, payload.model_dump(), now=now)


@router.get("/{task_id}", response_model=TaskOut)
def api_get_task(task_id: int, user: CurrentUser, db: Session = Depends(get_db)):
    return get_task(db, user.id, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def api_update_task(
    task_id: int,
    payload: TaskUpdate,
    user: CurrentUser,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return update_task(db, user.id, task_id, payload.model_dump(exclude_unset=True), now=now)


@router.delete("/{task_id}", response_model=MessageOut)
def api_delete_task(task_id: int, user: CurrentUser, db: Session = Depends(get_db)):
    delete_task(db, user.id, task_id)
    return MessageOut(message="Task deleted successfully")
