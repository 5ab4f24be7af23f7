"""HTTP surface for trackers: CRUD plus the start/stop/sync transitions."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..crud.trackers import (
    create_tracker,
    delete_tracker,
    elapsed_time,
    get_tracker,
    list_trackers,
    start_tracker,
    stop_tracker,
    sync_tracker,
    update_tracker,
)
from ..db.session import get_db
from ..deps.auth import CurrentUser
from ..deps.clock import get_now
from ..models.tracker import Tracker
from ..schemas.tracker import TrackerCreate, TrackerDeleted, TrackerOut, TrackerUpdate
from ..services.timecalc import progress_percent

router = APIRouter(prefix="/api/tracker", tags=["tracker"])


def _tracker_to_schema(tracker: Tracker, now: datetime) -> TrackerOut:
    payload = TrackerOut.model_validate(tracker, from_attributes=True)
    elapsed = elapsed_time(tracker, now)
    return payload.model_copy(
        update={
            "elapsed_time": elapsed,
            "target_progress": progress_percent(elapsed, tracker.target_duration),
            "weekly_progress": progress_percent(elapsed, tracker.weekly_goal),
        }
    )


@router.get("", response_model=list[TrackerOut])
def api_list_trackers(user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return [_tracker_to_schema(tracker, now) for tracker in list_trackers(db, user.id)]


@router.post("", response_model=TrackerOut, status_code=status.HTTP_201_CREATED)
def api_create_tracker(
    payload: TrackerCreate, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    tracker = create_tracker(db, user.id, payload.model_dump(), now=now)
    return _tracker_to_schema(tracker, now)


@router.get("/{tracker_id}", response_model=TrackerOut)
def api_get_tracker(
    tracker_id: int, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return _tracker_to_schema(get_tracker(db, user.id, tracker_id), now)


@router.put("/{tracker_id}", response_model=TrackerOut)
def api_update_tracker(
    tracker_id: int,
    payload: TrackerUpdate,
    user: CurrentUser,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    tracker = update_tracker(db, user.id, tracker_id, payload.model_dump(exclude_unset=True), now=now)
    return _tracker_to_schema(tracker, now)


@router.delete("/{tracker_id}", response_model=TrackerDeleted)
def api_delete_tracker(tracker_id: int, user: CurrentUser, db: Session = Depends(get_db)):
    return TrackerDeleted(id=delete_tracker(db, user.id, tracker_id))


@router.patch("/{tracker_id}/start", response_model=TrackerOut)
def api_start_tracker(
    tracker_id: int, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return _tracker_to_schema(start_tracker(db, user.id, tracker_id, now=now), now)


@router.patch("/{tracker_id}/stop", response_model=TrackerOut)
def api_stop_tracker(
    tracker_id: int, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return _tracker_to_schema(stop_tracker(db, user.id, tracker_id, now=now), now)


@router.post("/{tracker_id}/sync", response_model=TrackerOut)
def api_sync_tracker(
    tracker_id: int, user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)
):
    return _tracker_to_schema(sync_tracker(db, user.id, tracker_id, now=now), now)
