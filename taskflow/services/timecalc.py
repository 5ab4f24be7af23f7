from __future__ import annotations

from datetime import datetime, timedelta, timezone

ONE_SECOND = timedelta(seconds=1)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def to_iso(dt: datetime) -> str:
    """Serialize as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def parse_iso(ts: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    Naive values are taken as UTC. Returns None if ts is falsy.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def elapsed_seconds(start: str | datetime | None, end: datetime) -> int:
    """Whole seconds between start and end, truncated and never negative."""
    s = parse_iso(start) if isinstance(start, str) or start is None else start
    if s is None:
        return 0
    if s.tzinfo is None:
        s = s.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    delta = (end - s) // ONE_SECOND
    return max(delta, 0)


def progress_percent(total: int | None, goal: int | None) -> int:
    """Share of ``goal`` covered by ``total`` as a whole percentage capped at 100.

    Halves round up. A missing or zero goal reports 0.
    """
    if not goal or goal <= 0:
        return 0
    total = max(total or 0, 0)
    percent = (200 * total + goal) // (2 * goal)
    return min(100, percent)


def format_duration(seconds: int | None) -> str:
    """Render seconds as ``HH:MM:SS``; hours grow past two digits as needed."""
    seconds = max(seconds or 0, 0)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
