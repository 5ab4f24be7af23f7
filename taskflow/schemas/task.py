from __future__ import annotations

from typing import Optional

from pydantic import StrictBool

from .base import CamelModel


class TaskCreate(CamelModel):
    title: str = ""


class TaskUpdate(CamelModel):
    title: Optional[str] = None
    completed: Optional[StrictBool] = None


class TaskOut(CamelModel):
    id: int
    title: str
    completed: bool
    user_id: int
    created_at: str
    updated_at: str
