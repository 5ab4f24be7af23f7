from __future__ import annotations

from datetime import datetime

from ..services.timecalc import utcnow


def get_now() -> datetime:
    """Request-scoped "now"; tests override this to move the clock."""
    return utcnow()
