# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from dataclasses import dataclass
import os

from uploadservicelayer.db import DatabaseConfig
from uploadservicelayer.exceptions.catalog import ConfigurationException

DEFAULT_MAX_UPLOAD_SIZE = 10 << 20


@dataclass
class Config:
    db: DatabaseConfig
    auth_secret: str
    http_host: str = "0.0.0.0"
    http_port: int = 8081
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    shutdown_timeout: int = 5
    debug: bool = False
    debug_queries: bool = False
    debug_http: bool = False


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationException(
            f"{name} must be an integer, got {value!r}."
        )


def _get_bool(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes", "on")


def read_config() -> Config:
    """Build the configuration from the UPLOAD_* environment variables.

    The shared secret has no default: the service refuses to start
    without one.
    """
    auth_secret = os.getenv("UPLOAD_AUTH_SECRET", "")
    if not auth_secret:
        raise ConfigurationException(
            "UPLOAD_AUTH_SECRET is not set. Refusing to start without a shared secret."
        )

    database_config = DatabaseConfig(
        name=os.getenv("UPLOAD_DATABASE_NAME", "filedb"),
        host=os.getenv("UPLOAD_DATABASE_HOST", "localhost"),
        username=os.getenv("UPLOAD_DATABASE_USER", "postgres"),
        password=os.getenv("UPLOAD_DATABASE_PASSWORD", "postgres"),
        port=_get_int("UPLOAD_DATABASE_PORT", 5432),
    )

    debug = _get_bool("UPLOAD_DEBUG")
    return Config(
        db=database_config,
        auth_secret=auth_secret,
        http_host=os.getenv("UPLOAD_HTTP_HOST", "0.0.0.0"),
        http_port=_get_int("UPLOAD_HTTP_PORT", 8081),
        max_upload_size=_get_int("UPLOAD_MAX_SIZE", DEFAULT_MAX_UPLOAD_SIZE),
        shutdown_timeout=_get_int("UPLOAD_SHUTDOWN_TIMEOUT", 5),
        debug=debug,
        debug_queries=debug or _get_bool("UPLOAD_DEBUG_QUERIES"),
        debug_http=debug or _get_bool("UPLOAD_DEBUG_HTTP"),
    )
