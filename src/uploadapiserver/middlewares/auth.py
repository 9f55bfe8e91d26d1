#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

import hmac
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp
import structlog

logger = structlog.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Only let through requests whose Authorization header is the shared secret."""

    def __init__(self, app: ASGIApp, secret: str):
        super().__init__(app)
        self._secret = secret.encode("utf-8")

    def is_authorized(self, request: Request) -> bool:
        provided = request.headers.get("authorization", "")
        return hmac.compare_digest(provided.encode("utf-8"), self._secret)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self.is_authorized(request):
            logger.warning("unauthorized access", path=request.url.path)
            return PlainTextResponse("Unauthorized", status_code=401)
        return await call_next(request)
