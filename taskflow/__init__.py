"""Application wiring for the TaskFlow API.

Configuration, database bootstrap, middleware, exception handlers and the
API routers all come together here. ``taskflow.main`` adds logging, health
and metrics on top of the ``app`` built below.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.errors import register_exception_handlers
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the models registers their tables with ``Base.metadata``.
from .models import note as _note  # noqa: F401
from .models import task as _task  # noqa: F401
from .models import tracker as _tracker  # noqa: F401
from .models import user as _user  # noqa: F401

from .routers import api_auth as api_auth_router
from .routers import api_dashboard as api_dashboard_router
from .routers import api_notes as api_notes_router
from .routers import api_tasks as api_tasks_router
from .routers import api_tracker as api_tracker_router


def init_db(bind=engine) -> None:
    """Create missing tables and apply additive migrations."""

    Base.metadata.create_all(bind=bind)
    run_migrations(bind)


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        description="Tasks, notes and time tracking for authenticated users.",
        version="1.0.0",
    )

    # Starlette runs middleware last-added-first, so the request id wraps everything.
    application.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    application.add_middleware(RequestIdMiddleware)

    register_exception_handlers(application)

    @application.get("/", tags=["health"])
    def root():
        return {"message": "TaskFlow!"}

    application.include_router(api_auth_router.router)
    application.include_router(api_tasks_router.router)
    application.include_router(api_notes_router.router)
    application.include_router(api_tracker_router.router)
    application.include_router(api_dashboard_router.router)
    return application


init_db()
app = create_app()


__all__ = ["app", "create_app", "init_db"]
