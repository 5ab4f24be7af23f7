"""Small additive migrations for databases created by older releases."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

# Columns that were introduced after the first release. ``create_all`` never
# alters existing tables, so older databases get them added here.
ADDED_COLUMNS: dict[str, dict[str, str]] = {
    "tasks": {
        "updated_at": "TEXT NOT NULL DEFAULT ''",
    },
    "notes": {
        "category": "TEXT NOT NULL DEFAULT 'General'",
        "type": "TEXT NOT NULL DEFAULT 'regular'",
        "created_at": "TEXT NOT NULL DEFAULT ''",
    },
    "trackers": {
        "target_duration": "INTEGER",
        "weekly_goal": "INTEGER",
        "updated_at": "TEXT NOT NULL DEFAULT ''",
    },
    "tracker_sessions": {
        "duration": "INTEGER",
    },
}

INDEXES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("notes", "ix_notes_type", ("type",)),
    ("tracker_sessions", "ix_tracker_sessions_tracker_id", ("tracker_id",)),
)


def _column_names(engine: Engine, table: str) -> set[str]:
    inspector = inspect(engine)
    if not inspector.has_table(table):
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


def _add_column(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str]) -> None:
    cols_sql = ", ".join(cols)
    with engine.begin() as conn:
        conn.execute(text(f"CREATE INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


BACKFILLS: tuple[tuple[str, str, str], ...] = (
    ("tasks", "updated_at", "created_at"),
    ("notes", "created_at", "updated_at"),
    ("trackers", "updated_at", "created_at"),
)


def _backfill_timestamps(engine: Engine) -> None:
    """Copy the sibling timestamp into columns that were just added empty."""

    pending = [
        (table, target, source)
        for table, target, source in BACKFILLS
        if {target, source} <= _column_names(engine, table)
    ]
    with engine.begin() as conn:
        for table, target, source in pending:
            conn.execute(text(f"UPDATE {table} SET {target} = {source} WHERE {target} = ''"))


def run_migrations(engine: Engine) -> list[str]:
    """Bring an existing schema up to date. Returns the columns that were added."""

    added: list[str] = []
    for table, columns in ADDED_COLUMNS.items():
        existing = _column_names(engine, table)
        if not existing:
            # Table absent; Base.metadata.create_all builds the fresh schema.
            continue
        for name, dtype in columns.items():
            if name not in existing:
                _add_column(engine, table, f"{name} {dtype}")
                added.append(f"{table}.{name}")

    for table, name, cols in INDEXES:
        if _column_names(engine, table):
            _create_index_if_not_exists(engine, table, name, cols)

    if added:
        _backfill_timestamps(engine)
    return added
