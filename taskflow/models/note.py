"""SQLAlchemy model for regular and sticky notes."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

NOTE_CATEGORIES = ("General", "Work", "Personal", "Ideas", "Archive")
DEFAULT_CATEGORY = "General"
NOTE_TYPES = ("regular", "sticky")
DEFAULT_NOTE_TYPE = "regular"
UNTITLED = "Untitled"


class Note(Base):
    __tablename__ = "notes"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False, default=UNTITLED)
    content = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False, default=DEFAULT_CATEGORY)
    type = Column(Text, nullable=False, default=DEFAULT_NOTE_TYPE, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    owner = relationship("User", back_populates="notes")


__all__ = ["Note", "NOTE_CATEGORIES", "NOTE_TYPES", "DEFAULT_CATEGORY", "DEFAULT_NOTE_TYPE", "UNTITLED"]
