from __future__ import annotations

from typing import Optional

from .base import CamelModel


class NoteCreate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None


class NoteUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None


class NoteOut(CamelModel):
    id: int
    title: str
    content: str
    category: str
    type: str
    user_id: int
    created_at: str
    updated_at: str
