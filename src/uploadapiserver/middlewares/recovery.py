#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
import structlog

logger = structlog.getLogger(__name__)


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Turn any unexpected exception raised below into a 500 response.

    Expected failures are already answered by the handlers, so whatever
    reaches this point is a bug and is logged with its traceback.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("panic recovered", error=repr(e))
            return PlainTextResponse(
                "Internal Server Error", status_code=500
            )
