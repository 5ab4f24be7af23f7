from prometheus_fastapi_instrumentator import Instrumentator

from taskflow.core.config import settings
from taskflow.core.logging import configure_logging
from . import app as wired_app

configure_logging()
app = wired_app
instrumentator = Instrumentator(excluded_handlers=["/metrics", "/health"])


@app.get("/health", tags=["health"])
async def health() -> dict[str, bool]:
    return {"ok": True}


# Must run before the first request; middleware is frozen after startup.
instrumentator.instrument(app).expose(app, include_in_schema=False)


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("taskflow.main:app", host=settings.HOST, port=settings.PORT)
