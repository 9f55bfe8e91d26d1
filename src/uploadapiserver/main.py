# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import asyncio
from contextlib import AsyncExitStack
import logging

from dotenv import load_dotenv
import structlog

from uploadapiserver.api.base import API
from uploadapiserver.api.files import FilesHandler
from uploadapiserver.app import App, MiddlewareHandler, ServerConfig
from uploadapiserver.middlewares.auth import AuthenticationMiddleware
from uploadapiserver.middlewares.cors import CORSMiddleware
from uploadapiserver.middlewares.recovery import RecoveryMiddleware
from uploadapiserver.middlewares.request_logging import (
    RequestLoggingMiddleware,
)
from uploadapiserver.settings import Config, read_config
from uploadservicelayer.db import Database
from uploadservicelayer.db.repositories.files import FilesRepository
from uploadservicelayer.logging.configure import configure_logging

logger = structlog.getLogger()


def config_uvicorn_logging(level=logging.INFO) -> None:
    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.asgi").setLevel(level)
    # We have already a middleware to log this info: let's log only ERROR unless debug is enabled.
    logging.getLogger("uvicorn.access").setLevel(
        logging.ERROR if level == logging.INFO else level
    )


def build_middlewares(auth_secret: str) -> list[MiddlewareHandler]:
    """The interceptor chain, outermost first.

    Logging sees every request, even the rejected ones. Preflight requests
    are answered before authentication. Recovery covers authentication and
    the handler.
    """
    return [
        MiddlewareHandler(RequestLoggingMiddleware),
        MiddlewareHandler(CORSMiddleware),
        MiddlewareHandler(RecoveryMiddleware),
        MiddlewareHandler(AuthenticationMiddleware, secret=auth_secret),
    ]


def craft_app(repository: FilesRepository, config: Config) -> App:
    files_handler = FilesHandler(
        repository=repository, max_upload_size=config.max_upload_size
    )
    return App(
        app_title="File Upload Server",
        app_name="uploadapiserver",
        api=[API(prefix="", handlers=[files_handler])],
        middlewares=build_middlewares(config.auth_secret),
        server_config=ServerConfig(
            host=config.http_host,
            port=config.http_port,
            timeout_graceful_shutdown=config.shutdown_timeout,
        ),
    )


async def serve(config: Config, db: Database | None = None) -> None:
    """Acquire the resources, serve until a termination signal, release them.

    The schema and the insert statement are ready before the socket is
    bound: a failure there aborts the startup. Resources are released in
    reverse order of acquisition on every exit path.
    """
    async with AsyncExitStack() as stack:
        if db is None:
            db = Database(config.db, echo=config.debug_queries)
        stack.push_async_callback(db.close)

        repository = FilesRepository(db)
        await repository.setup()
        stack.push_async_callback(repository.close)

        app = craft_app(repository, config)
        logger.info(
            "Starting server", host=config.http_host, port=config.http_port
        )
        # uvicorn handles SIGINT/SIGTERM: it stops accepting connections and
        # waits for the in-flight requests up to the graceful timeout.
        await app.server.serve()
        logger.info("Server stopped")


def run(app_config: Config | None = None):
    load_dotenv()
    if app_config is None:
        app_config = read_config()

    configure_logging(
        level=logging.DEBUG if app_config.debug else logging.INFO,
        query_level=(
            logging.DEBUG if app_config.debug_queries else logging.WARNING
        ),
    )
    config_uvicorn_logging(
        logging.DEBUG if app_config.debug_http else logging.INFO
    )

    try:
        asyncio.run(serve(app_config))
    except Exception:
        logger.critical("The server terminated with an error", exc_info=True)
        raise
