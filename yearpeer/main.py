"""Main FastAPI application for the YearPeer backend."""
from fastapi import FastAPI, Request

from yearpeer.api.errors import register_error_handlers
from yearpeer.api.routes.calendar import router as calendar_router
from yearpeer.api.routes.goal import router as goal_router
from yearpeer.api.routes.task import router as task_router
from yearpeer.core.config import settings
from yearpeer.core.logging import configure_logging
from yearpeer.core.middleware import RequestIDMiddleware
from yearpeer.observability.client import init_opik
from yearpeer.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)
app.add_middleware(RequestIDMiddleware)
register_error_handlers(app)
app.include_router(goal_router)
app.include_router(task_router)
app.include_router(calendar_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
