from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..crud.notes import create_note, delete_note, get_note, list_notes, search_notes, update_note
from ..db.session import get_db
from ..deps.auth import CurrentUser
from ..deps.clock import get_now
from ..models.note import DEFAULT_CATEGORY, NOTE_CATEGORIES
from ..schemas.base import MessageOut
from ..schemas.note import NoteCreate, NoteOut, NoteUpdate

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut])
def api_list_notes(
    user: CurrentUser,
    note_type: str | None = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
):
    return list_notes(db, user.id, note_type)


@router.get("/categories")
def api_note_categories(user: CurrentUser):
    return {"categories": list(NOTE_CATEGORIES), "default": DEFAULT_CATEGORY}


@router.get("/search/{query}", response_model=list[NoteOut])
def api_search_notes(query: str, user: CurrentUser, db: Session = Depends(get_db)):
    return search_notes(db, user.id, query)


@router.get("/{note_id}", response_model=NoteOut)
def api_get_note(note_id: int, user: CurrentUser, db: Session = Depends(get_db)):
    return get_note(db, user.id, note_id)


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def api_create_note(
    payload: NoteCreate, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return create_note(db, user.id, payload.model_dump(), now=now)


@router.put("/{note_id}", response_model=NoteOut)
def api_update_note(
    note_id: int,
    payload: NoteUpdate,
    user: CurrentUser,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return update_note(db, user.id, note_id, payload.model_dump(exclude_unset=True), now=now)


@router.delete("/{note_id}", response_model=MessageOut)
def api_delete_note(note_id: int, user: CurrentUser, db: Session = Depends(get_db)):
    delete_note(db, user.id, note_id)
    return MessageOut(message="Note deleted successfully")
