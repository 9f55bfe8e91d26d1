#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from dataclasses import dataclass

from sqlalchemy import URL
from sqlalchemy.ext.asyncio import create_async_engine
import structlog

logger = structlog.getLogger(__name__)


@dataclass
class DatabaseConfig:
    name: str
    host: str
    username: str | None = None
    password: str | None = None
    port: int | None = None

    @property
    def dsn(self) -> URL:
        return URL.create(
            "postgresql+asyncpg",
            host=self.host,
            port=self.port,
            database=self.name,
            username=self.username,
            password=self.password,
        )


class Database:
    def __init__(self, config: DatabaseConfig, echo: bool = False):
        self.config = config
        # asyncpg prepares every statement it runs and keeps it in a
        # per-connection cache, so pooled connections reuse the insert plan.
        self.engine = create_async_engine(
            config.dsn,
            echo=echo,
            pool_pre_ping=True,
        )

    async def close(self) -> None:
        """Dispose the connection pool. Failures are logged, not raised."""
        try:
            await self.engine.dispose()
        except Exception as e:
            logger.warning("Problem closing the database connection", exc_info=e)
