"""Pydantic schemas for trackers, their sessions and derived progress."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, StrictInt

from .base import CamelModel


class TrackerCreate(CamelModel):
    title: str = ""
    target_duration: Optional[StrictInt] = None
    weekly_goal: Optional[StrictInt] = None


class TrackerUpdate(CamelModel):
    title: Optional[str] = None
    target_duration: Optional[StrictInt] = None
    weekly_goal: Optional[StrictInt] = None


class SessionOut(CamelModel):
    id: int
    tracker_id: int
    start_time: str
    end_time: Optional[str] = None
    duration: Optional[int] = None


class TrackerOut(CamelModel):
    id: int
    title: str
    total_time: int
    target_duration: Optional[int] = None
    weekly_goal: Optional[int] = None
    is_running: bool
    start_time: Optional[str] = None
    user_id: int
    created_at: str
    updated_at: str
    elapsed_time: int = 0
    target_progress: int = 0
    weekly_progress: int = 0
    sessions: list[SessionOut] = Field(default_factory=list)


class TrackerDeleted(CamelModel):
    message: str = "Tracker deleted successfully"
    id: int


class DashboardSummary(CamelModel):
    tasks_completed: int
    tasks_remaining: int
    time_logged: int
    time_logged_display: str
    tracker_progress: int
    active_tracker_id: Optional[int] = None
