#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from uploadservicelayer.context import Context

logger = structlog.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one log line per request, whatever happened further down the chain."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        context = Context()
        request.state.context = context
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            context_id=context.context_id,
        )
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            logger.info(
                "request completed",
                method=request.method,
                path=request.url.path,
                status_code=(
                    response.status_code if response is not None else None
                ),
                duration=context.get_elapsed_time_seconds(),
            )
