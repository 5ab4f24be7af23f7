"""Tracker accounting: start/stop/sync transitions and elapsed-time totals."""

from datetime import datetime, timedelta, timezone

import pytest

from taskflow.core.errors import InvalidStateError, NotFoundError, ValidationFailed
from taskflow.crud.trackers import (
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
from taskflow.crud.users import create_user
from taskflow.models.tracker import TrackerSession

T0 = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


@pytest.fixture()
def owner(db_session):
    return create_user(db_session, {"email": "ada@example.com", "username": "ada", "password": "s3cret!"})


@pytest.fixture()
def tracker(db_session, owner):
    return create_tracker(db_session, owner.id, {"title": "Reading", "target_duration": 1800}, now=T0)


def open_sessions(db_session, tracker_id):
    return (
        db_session.query(TrackerSession)
        .filter(TrackerSession.tracker_id == tracker_id, TrackerSession.end_time.is_(None))
        .all()
    )


def assert_consistent(db_session, tracker):
    running = tracker.is_running
    assert running == (tracker.start_time is not None)
    assert len(open_sessions(db_session, tracker.id)) == (1 if running else 0)


def test_new_tracker_is_stopped_with_zero_total(db_session, tracker):
    assert tracker.total_time == 0
    assert tracker.is_running is False
    assert tracker.start_time is None
    assert tracker.target_duration == 1800
    assert tracker.sessions == []
    assert_consistent(db_session, tracker)


def test_start_then_stop_accumulates_elapsed_seconds(db_session, owner, tracker):
    started = start_tracker(db_session, owner.id, tracker.id, now=at(0))
    assert started.is_running is True
    assert started.start_time == "2024-05-01T09:00:00.000Z"
    assert_consistent(db_session, started)

    stopped = stop_tracker(db_session, owner.id, tracker.id, now=at(10))
    assert stopped.total_time == 10
    assert stopped.is_running is False
    assert stopped.start_time is None
    assert_consistent(db_session, stopped)

    (session,) = stopped.sessions
    assert session.duration == 10
    assert session.end_time == "2024-05-01T09:00:10.000Z"


def test_stop_twice_fails_with_invalid_state(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    stop_tracker(db_session, owner.id, tracker.id, now=at(5))
    with pytest.raises(InvalidStateError):
        stop_tracker(db_session, owner.id, tracker.id, now=at(6))
    assert get_tracker(db_session, owner.id, tracker.id).total_time == 5


def test_start_twice_fails_and_leaves_single_open_session(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    with pytest.raises(InvalidStateError):
        start_tracker(db_session, owner.id, tracker.id, now=at(3))
    refreshed = get_tracker(db_session, owner.id, tracker.id)
    assert refreshed.start_time == "2024-05-01T09:00:00.000Z"
    assert len(open_sessions(db_session, tracker.id)) == 1


def test_sync_requires_running_tracker(db_session, owner, tracker):
    with pytest.raises(InvalidStateError):
        sync_tracker(db_session, owner.id, tracker.id, now=at(1))


def test_sync_folds_elapsed_time_without_closing_session(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    synced = sync_tracker(db_session, owner.id, tracker.id, now=at(60))
    assert synced.total_time == 60
    assert synced.is_running is True
    assert synced.start_time == "2024-05-01T09:01:00.000Z"
    (session,) = synced.sessions
    assert session.end_time is None
    assert session.duration == 60
    assert_consistent(db_session, synced)

    # A repeated heartbeat at the same instant adds nothing.
    again = sync_tracker(db_session, owner.id, tracker.id, now=at(60))
    assert again.total_time == 60


def test_syncs_then_stop_match_an_unsynced_run(db_session, owner):
    synced = create_tracker(db_session, owner.id, {"title": "Synced"}, now=T0)
    plain = create_tracker(db_session, owner.id, {"title": "Plain"}, now=T0)
    for tracker in (synced, plain):
        start_tracker(db_session, owner.id, tracker.id, now=at(0))

    for offset in (0.4, 1.7, 2.9, 61.3, 125.05):
        sync_tracker(db_session, owner.id, synced.id, now=at(offset))

    final_synced = stop_tracker(db_session, owner.id, synced.id, now=at(181.6))
    final_plain = stop_tracker(db_session, owner.id, plain.id, now=at(181.6))

    assert final_plain.total_time == 181
    assert final_synced.total_time == final_plain.total_time
    assert final_synced.sessions[0].duration == final_synced.total_time


def test_multiple_runs_create_multiple_sessions(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    stop_tracker(db_session, owner.id, tracker.id, now=at(30))
    start_tracker(db_session, owner.id, tracker.id, now=at(100))
    stopped = stop_tracker(db_session, owner.id, tracker.id, now=at(145))
    assert stopped.total_time == 75
    assert [s.duration for s in stopped.sessions] == [45, 30]


def test_elapsed_time_reads_running_tail_fresh(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    stop_tracker(db_session, owner.id, tracker.id, now=at(20))
    running = start_tracker(db_session, owner.id, tracker.id, now=at(50))
    assert elapsed_time(running, at(50)) == 20
    assert elapsed_time(running, at(62.9)) == 32
    stopped = stop_tracker(db_session, owner.id, tracker.id, now=at(70))
    assert elapsed_time(stopped, at(5000)) == 40


def test_trackers_are_owner_scoped(db_session, owner, tracker):
    other = create_user(db_session, {"email": "bob@example.com", "username": "bob", "password": "hunter22"})
    assert list_trackers(db_session, other.id) == []
    with pytest.raises(NotFoundError):
        get_tracker(db_session, other.id, tracker.id)
    with pytest.raises(NotFoundError):
        start_tracker(db_session, other.id, tracker.id, now=at(0))
    with pytest.raises(NotFoundError):
        delete_tracker(db_session, other.id, tracker.id)
    assert get_tracker(db_session, owner.id, tracker.id).is_running is False


def test_update_tracker_goals(db_session, owner, tracker):
    updated = update_tracker(
        db_session, owner.id, tracker.id, {"title": "Deep reading", "weekly_goal": 7200}, now=at(1)
    )
    assert updated.title == "Deep reading"
    assert updated.weekly_goal == 7200
    assert updated.target_duration == 1800

    cleared = update_tracker(db_session, owner.id, tracker.id, {"target_duration": None}, now=at(2))
    assert cleared.target_duration is None


def test_tracker_validation(db_session, owner, tracker):
    with pytest.raises(ValidationFailed):
        create_tracker(db_session, owner.id, {"title": "   "}, now=T0)
    with pytest.raises(ValidationFailed):
        create_tracker(db_session, owner.id, {"title": "Run", "weekly_goal": -5}, now=T0)
    with pytest.raises(ValidationFailed):
        update_tracker(db_session, owner.id, tracker.id, {"title": ""}, now=T0)


def test_delete_tracker_removes_sessions(db_session, owner, tracker):
    start_tracker(db_session, owner.id, tracker.id, now=at(0))
    stop_tracker(db_session, owner.id, tracker.id, now=at(3))
    assert delete_tracker(db_session, owner.id, tracker.id) == tracker.id
    assert db_session.query(TrackerSession).count() == 0
    with pytest.raises(NotFoundError):
        get_tracker(db_session, owner.id, tracker.id)
