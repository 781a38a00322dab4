"""Custom FastAPI middleware."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from yearpeer.core.context import request_id_ctx_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of the call and echo it back as X-Request-Id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        token = request_id_ctx_var.set(request_id)
        started = perf_counter()

        try:
            response = await call_next(request)
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (perf_counter() - started) * 1000,
            )
        finally:
            request_id_ctx_var.reset(token)

        response.headers["X-Request-Id"] = request_id
        return response
