# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from dataclasses import dataclass

from fastapi import FastAPI
import uvicorn

from uploadapiserver.api.base import API


class MiddlewareHandler:
    def __init__(self, middleware_class, **kwargs):
        self.middleware_class = middleware_class
        self.kwargs = kwargs

    def get_middleware(self):
        return self.middleware_class

    def get_kwargs(self):
        return self.kwargs


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8081
    timeout_graceful_shutdown: int = 5


class App:
    def __init__(
        self,
        app_title: str,
        app_name: str,
        api: list[API],
        # Outermost first: the first in the list is the first processing the request.
        middlewares: list[MiddlewareHandler],
        server_config: ServerConfig,
    ):
        self._app_title = app_title
        self._name = app_name
        self._api = api
        self._middlewares = middlewares
        self._server_config = server_config
        self._app = self._prepare_app()
        self._server = self._prepare_server()

    def _prepare_app(self):
        app = FastAPI(
            title=self._app_title,
            name=self._name,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )

        for api in self._api:
            api.register(app.router)

        # Starlette wraps the application with each added middleware, so the
        # last one added ends up outermost.
        for middleware in reversed(self._middlewares):
            app.add_middleware(
                middleware.get_middleware(), **middleware.get_kwargs()
            )

        return app

    def _prepare_server(self) -> uvicorn.Server:
        server_config = uvicorn.Config(
            self._app,
            loop="asyncio",
            proxy_headers=True,
            host=self._server_config.host,
            port=self._server_config.port,
            timeout_graceful_shutdown=self._server_config.timeout_graceful_shutdown,
            # We configure the logging OUTSIDE the library in order to use our custom json formatter.
            log_config=None,
        )
        return uvicorn.Server(server_config)

    @property
    def fastapi_app(self) -> FastAPI:
        return self._app

    @property
    def server(self) -> uvicorn.Server:
        return self._server
