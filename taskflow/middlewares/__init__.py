from __future__ import annotations

from .request_id import RequestIdMiddleware, bind_user, request_id_ctx_var, user_id_ctx_var
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "bind_user",
    "request_id_ctx_var",
    "user_id_ctx_var",
]
