from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session

from ..core.errors import ValidationFailed
from ..models.note import (
    DEFAULT_CATEGORY,
    DEFAULT_NOTE_TYPE,
    NOTE_CATEGORIES,
    NOTE_TYPES,
    UNTITLED,
    Note,
)
from ..services.timecalc import to_iso, utcnow
from .owned import OwnedStore, commit

store: OwnedStore[Note] = OwnedStore(
    Note,
    label="Note",
    order_by=(desc(Note.updated_at), desc(Note.id)),
)


def _title(value: object) -> str:
    title = value.strip() if isinstance(value, str) else ""
    return title or UNTITLED


def _category(value: object) -> str:
    category = value.strip() if isinstance(value, str) else ""
    if not category:
        return DEFAULT_CATEGORY
    if category not in NOTE_CATEGORIES:
        raise ValidationFailed.single(
            "category", f"Category must be one of: {', '.join(NOTE_CATEGORIES)}"
        )
    return category


def _note_type(value: object) -> str:
    note_type = value.strip().lower() if isinstance(value, str) else ""
    if not note_type:
        return DEFAULT_NOTE_TYPE
    if note_type not in NOTE_TYPES:
        raise ValidationFailed.single("type", f"Type must be one of: {', '.join(NOTE_TYPES)}")
    return note_type


def list_notes(db: Session, owner_id: int, note_type: str | None = None) -> list[Note]:
    # Unknown type filters are ignored rather than rejected.
    if note_type in NOTE_TYPES:
        return store.list(db, owner_id, Note.type == note_type)
    return store.list(db, owner_id)


def get_note(db: Session, owner_id: int, note_id: int) -> Note:
    return store.get(db, owner_id, note_id)


def create_note(db: Session, owner_id: int, payload: dict, *, now: datetime | None = None) -> Note:
    stamp = to_iso(now or utcnow())
    note = Note(
        title=_title(payload.get("title")),
        content=payload.get("content") or "",
        category=_category(payload.get("category")),
        type=_note_type(payload.get("type")),
        user_id=owner_id,
        created_at=stamp,
        updated_at=stamp,
    )
    return store.save(db, note)


def update_note(
    db: Session, owner_id: int, note_id: int, payload: dict, *, now: datetime | None = None
) -> Note:
    note = store.get(db, owner_id, note_id)
    changes: dict[str, object] = {}
    if payload.get("title") is not None:
        changes["title"] = _title(payload["title"])
    if payload.get("content") is not None:
        changes["content"] = payload["content"]
    if payload.get("category") is not None:
        changes["category"] = _category(payload["category"])
    if payload.get("type") is not None:
        changes["type"] = _note_type(payload["type"])
    store.apply(note, changes)
    note.updated_at = to_iso(now or utcnow())
    commit(db)
    db.refresh(note)
    return note


def delete_note(db: Session, owner_id: int, note_id: int) -> None:
    store.delete(db, owner_id, note_id)


def search_notes(db: Session, owner_id: int, query: str) -> list[Note]:
    term = (query or "").lower()
    if not term:
        return store.list(db, owner_id)
    # Escape LIKE wildcards so the query is matched literally.
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return store.list(
        db,
        owner_id,
        or_(
            func.lower(Note.title).like(pattern, escape="\\"),
            func.lower(Note.content).like(pattern, escape="\\"),
            func.lower(Note.category).like(pattern, escape="\\"),
        ),
    )
