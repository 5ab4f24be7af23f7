"""Owner-scoped persistence shared by tasks, notes and trackers.

Every read and write goes through the owner's id. A record that exists but
belongs to someone else is reported exactly like a missing one.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from ..core.errors import NotFoundError

ModelT = TypeVar("ModelT")
logger = logging.getLogger(__name__)


class OwnedStore(Generic[ModelT]):
    def __init__(
        self,
        model: type[ModelT],
        *,
        label: str,
        order_by: Iterable[Any] = (),
        options: Iterable[Any] = (),
    ) -> None:
        self.model = model
        self.label = label
        self.order_by = tuple(order_by)
        self.options = tuple(options)

    def query(self, owner_id: int, *criteria: Any) -> Select:
        stmt = select(self.model).where(self.model.user_id == owner_id, *criteria)
        if self.options:
            stmt = stmt.options(*self.options)
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        return stmt

    def list(self, db: Session, owner_id: int, *criteria: Any) -> list[ModelT]:
        return list(db.execute(self.query(owner_id, *criteria)).scalars().all())

    def find(self, db: Session, owner_id: int, record_id: int) -> ModelT | None:
        stmt = self.query(owner_id, self.model.id == record_id)
        return db.execute(stmt).scalars().first()

    def get(self, db: Session, owner_id: int, record_id: int) -> ModelT:
        record = self.find(db, owner_id, record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def save(self, db: Session, record: ModelT) -> ModelT:
        """Add and commit ``record`` in one transaction; roll back on failure."""
        db.add(record)
        commit(db)
        db.refresh(record)
        return record

    def delete(self, db: Session, owner_id: int, record_id: int) -> None:
        record = self.get(db, owner_id, record_id)
        db.delete(record)
        commit(db)

    @staticmethod
    def apply(record: ModelT, changes: dict[str, Any]) -> None:
        for field, value in changes.items():
            setattr(record, field, value)


def commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("db.commit_failed")
        raise
