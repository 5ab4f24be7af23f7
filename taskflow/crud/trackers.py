"""Tracker CRUD and the start/stop/sync elapsed-time accounting.

A tracker is either stopped or running. Running means ``is_running`` is
true, ``start_time`` holds the instant time was last folded into
``total_time`` and exactly one session is open. Every transition writes the
tracker and its open session in a single commit.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload

from ..core.errors import InvalidStateError, ValidationFailed
from ..models.tracker import Tracker, TrackerSession
from ..services.timecalc import elapsed_seconds, parse_iso, to_iso, utcnow
from .owned import OwnedStore, commit

logger = logging.getLogger(__name__)

store: OwnedStore[Tracker] = OwnedStore(
    Tracker,
    label="Tracker",
    order_by=(desc(Tracker.created_at), desc(Tracker.id)),
    options=(selectinload(Tracker.sessions),),
)

DURATION_FIELDS = ("target_duration", "weekly_goal")


def _title(value: object, *, message: str) -> str:
    title = value.strip() if isinstance(value, str) else ""
    if not title:
        raise ValidationFailed.single("title", message)
    return title


def _duration(field: str, value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationFailed.single(field, f"{field} must be a non-negative number of seconds")
    return value


def _log(event: str, tracker: Tracker, **fields: object) -> None:
    data = {"tracker_id": tracker.id, "user_id": tracker.user_id, "total_time": tracker.total_time}
    data.update(fields)
    logger.info(event, extra={"extra_data": data})


def list_trackers(db: Session, owner_id: int) -> list[Tracker]:
    return store.list(db, owner_id)


def get_tracker(db: Session, owner_id: int, tracker_id: int) -> Tracker:
    return store.get(db, owner_id, tracker_id)


def create_tracker(db: Session, owner_id: int, payload: dict, *, now: datetime | None = None) -> Tracker:
    title = _title(payload.get("title"), message="Tracker title is required")
    durations = {field: _duration(field, payload.get(field)) for field in DURATION_FIELDS}
    stamp = to_iso(now or utcnow())
    tracker = Tracker(
        title=title,
        total_time=0,
        is_running=False,
        start_time=None,
        user_id=owner_id,
        created_at=stamp,
        updated_at=stamp,
        **durations,
    )
    tracker = store.save(db, tracker)
    _log("tracker.created", tracker)
    return tracker


def update_tracker(
    db: Session, owner_id: int, tracker_id: int, payload: dict, *, now: datetime | None = None
) -> Tracker:
    tracker = store.get(db, owner_id, tracker_id)
    changes: dict[str, object] = {}
    if payload.get("title") is not None:
        changes["title"] = _title(payload["title"], message="Tracker title cannot be empty")
    for field in DURATION_FIELDS:
        # An explicit null clears the goal.
        if field in payload:
            changes[field] = _duration(field, payload[field])
    store.apply(tracker, changes)
    tracker.updated_at = to_iso(now or utcnow())
    commit(db)
    db.refresh(tracker)
    return tracker


def delete_tracker(db: Session, owner_id: int, tracker_id: int) -> int:
    store.delete(db, owner_id, tracker_id)
    logger.info("tracker.deleted", extra={"extra_data": {"tracker_id": tracker_id, "user_id": owner_id}})
    return tracker_id


def _require_open_session(tracker: Tracker) -> TrackerSession:
    session = tracker.open_session
    if not tracker.is_running or session is None:
        raise InvalidStateError("Tracker not running")
    return session


def start_tracker(db: Session, owner_id: int, tracker_id: int, *, now: datetime | None = None) -> Tracker:
    tracker = store.get(db, owner_id, tracker_id)
    if tracker.is_running or tracker.open_session is not None:
        raise InvalidStateError("Tracker already running")
    stamp = to_iso(now or utcnow())
    tracker.sessions.append(TrackerSession(start_time=stamp, created_at=stamp))
    tracker.is_running = True
    tracker.start_time = stamp
    tracker.updated_at = stamp
    commit(db)
    db.refresh(tracker)
    _log("tracker.started", tracker)
    return tracker


def stop_tracker(db: Session, owner_id: int, tracker_id: int, *, now: datetime | None = None) -> Tracker:
    tracker = store.get(db, owner_id, tracker_id)
    session = _require_open_session(tracker)
    now = now or utcnow()
    delta = elapsed_seconds(session.start_time, now)
    stamp = to_iso(now)

    # Synced time is already part of total_time; only the tail is new.
    session.end_time = stamp
    session.duration = (session.duration or 0) + delta
    tracker.total_time = (tracker.total_time or 0) + delta
    tracker.is_running = False
    tracker.start_time = None
    tracker.updated_at = stamp
    commit(db)
    db.refresh(tracker)
    _log("tracker.stopped", tracker, delta=delta, session_id=session.id)
    return tracker


def sync_tracker(db: Session, owner_id: int, tracker_id: int, *, now: datetime | None = None) -> Tracker:
    tracker = store.get(db, owner_id, tracker_id)
    session = _require_open_session(tracker)
    now = now or utcnow()
    anchor = session.start_time
    delta = elapsed_seconds(anchor, now)
    if delta == 0:
        # Nothing whole to fold in yet; moving the anchor would drop the fraction.
        return tracker

    # Advance the anchor by whole seconds only so truncation never loses time.
    stamp = to_iso(_advance(anchor, delta))
    session.duration = (session.duration or 0) + delta
    session.start_time = stamp
    tracker.total_time = (tracker.total_time or 0) + delta
    tracker.start_time = stamp
    tracker.updated_at = to_iso(now)
    commit(db)
    db.refresh(tracker)
    _log("tracker.synced", tracker, delta=delta, session_id=session.id)
    return tracker


def _advance(anchor: str, seconds: int) -> datetime:
    return parse_iso(anchor) + timedelta(seconds=seconds)


def elapsed_time(tracker: Tracker, now: datetime | None = None) -> int:
    """Authoritative elapsed seconds: the stored total plus any running tail."""
    total = tracker.total_time or 0
    if not tracker.is_running:
        return total
    return total + elapsed_seconds(tracker.start_time, now or utcnow())
