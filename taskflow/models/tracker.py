"""SQLAlchemy models for timed activities and their start/stop sessions."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Tracker(Base):
    """A timed activity with an accumulated total in whole seconds.

    ``start_time`` is set exactly when ``is_running`` is true, and a running
    tracker owns exactly one open session (``end_time`` is NULL).
    """

    __tablename__ = "trackers"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    total_time = Column(Integer, nullable=False, default=0)
    target_duration = Column(Integer, nullable=True)
    weekly_goal = Column(Integer, nullable=True)
    is_running = Column(Boolean, nullable=False, default=False)
    start_time = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    owner = relationship("User", back_populates="trackers")
    sessions = relationship(
        "TrackerSession",
        back_populates="tracker",
        cascade="all, delete-orphan",
        order_by=lambda: TrackerSession.id.desc(),
    )

    @property
    def open_session(self) -> "TrackerSession | None":
        for session in self.sessions:
            if session.end_time is None:
                return session
        return None


class TrackerSession(Base):
    """One start->stop interval. ``start_time`` moves forward on every sync."""

    __tablename__ = "tracker_sessions"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    tracker_id = Column(Integer, ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=True)
    duration = Column(Integer, nullable=True)
    created_at = Column(Text, nullable=False)

    tracker = relationship("Tracker", back_populates="sessions")


__all__ = ["Tracker", "TrackerSession"]
