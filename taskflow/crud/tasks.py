from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..core.errors import ValidationFailed
from ..models.task import Task
from ..services.timecalc import to_iso, utcnow
from .owned import OwnedStore, commit

store: OwnedStore[Task] = OwnedStore(
    Task,
    label="Task",
    order_by=(desc(Task.created_at), desc(Task.id)),
)


def _clean_title(value: object, *, message: str) -> str:
    title = (value or "").strip() if isinstance(value, str) else ""
    if not title:
        raise ValidationFailed.single("title", message)
    return title


def list_tasks(db: Session, owner_id: int) -> list[Task]:
    return store.list(db, owner_id)


def get_task(db: Session, owner_id: int, task_id: int) -> Task:
    return store.get(db, owner_id, task_id)


def create_task(db: Session, owner_id: int, payload: dict, *, now: datetime | None = None) -> Task:
    title = _clean_title(payload.get("title"), message="Task title is required")
    stamp = to_iso(now or utcnow())
    task = Task(title=title, completed=False, user_id=owner_id, created_at=stamp, updated_at=stamp)
    return store.save(db, task)


def update_task(
    db: Session, owner_id: int, task_id: int, payload: dict, *, now: datetime | None = None
) -> Task:
    task = store.get(db, owner_id, task_id)
    changes: dict[str, object] = {}
    if payload.get("title") is not None:
        changes["title"] = _clean_title(payload["title"], message="Task title cannot be empty")
    if payload.get("completed") is not None:
        if not isinstance(payload["completed"], bool):
            raise ValidationFailed.single("completed", "Completed must be a boolean")
        changes["completed"] = payload["completed"]
    if changes:
        store.apply(task, changes)
        task.updated_at = to_iso(now or utcnow())
        commit(db)
        db.refresh(task)
    return task


def delete_task(db: Session, owner_id: int, task_id: int) -> None:
    store.delete(db, owner_id, task_id)


def count_tasks(db: Session, owner_id: int) -> tuple[int, int]:
    """Return ``(completed, remaining)`` for the owner's tasks."""
    tasks = store.list(db, owner_id)
    completed = sum(1 for task in tasks if task.completed)
    return completed, len(tasks) - completed
