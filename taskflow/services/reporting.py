from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..crud.tasks import count_tasks
from ..crud.trackers import elapsed_time, list_trackers
from .timecalc import format_duration, progress_percent, utcnow


def calculate_dashboard(db: Session, owner_id: int, now: datetime | None = None) -> Dict[str, Any]:
    """Summarize an owner's tasks and trackers for the dashboard.

    ``time_logged`` counts running trackers up to ``now``; ``tracker_progress``
    compares it with the sum of every weekly goal.
    """

    now = now or utcnow()
    completed, remaining = count_tasks(db, owner_id)
    trackers = list_trackers(db, owner_id)
    time_logged = sum(elapsed_time(tracker, now) for tracker in trackers)
    total_goals = sum(tracker.weekly_goal or 0 for tracker in trackers)
    active = next((tracker for tracker in trackers if tracker.is_running), None)
    return {
        "tasks_completed": completed,
        "tasks_remaining": remaining,
        "time_logged": time_logged,
        "time_logged_display": format_duration(time_logged),
        "tracker_progress": progress_percent(time_logged, total_goals),
        "active_tracker_id": active.id if active else None,
    }
