from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..deps.auth import CurrentUser
from ..deps.clock import get_now
from ..schemas.tracker import DashboardSummary
from ..services.reporting import calculate_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
def api_dashboard(user: CurrentUser, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return DashboardSummary(**calculate_dashboard(db, user.id, now))
