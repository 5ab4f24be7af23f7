"""FastAPI dependencies shared by the routers."""

from .auth import CurrentUser, get_current_user, login_rate_limit
from .clock import get_now

__all__ = ["CurrentUser", "get_current_user", "get_now", "login_rate_limit"]
