#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from asyncpg import PostgresError
from sqlalchemy import Insert, insert
from sqlalchemy.exc import SQLAlchemyError
import structlog

from uploadservicelayer.db import Database
from uploadservicelayer.db.tables import FilesTable, METADATA
from uploadservicelayer.exceptions.catalog import StorageException

logger = structlog.getLogger(__name__)


class FilesRepository:
    """Owns the `files` table and the statement used to write into it.

    The repository has a lifecycle: `setup()` must complete before the
    first `insert()`, and `close()` releases the statement. The engine
    is owned by the `Database` and is closed separately, after this.
    """

    def __init__(self, db: Database):
        self.db = db
        self._insert_stmt: Insert | None = None
        self._prepared = None

    async def setup(self) -> None:
        """Create the table and its index if missing, then prepare the insert.

        The insert is prepared on the server so that a `files` table with
        an incompatible shape is detected here rather than on the first
        upload. Raises StorageException if the database can't be reached,
        the schema can't be created or the statement can't be prepared.
        """
        stmt = insert(FilesTable).returning(FilesTable.c.id)
        try:
            async with self.db.engine.begin() as conn:
                await conn.run_sync(METADATA.create_all)
                raw_connection = await conn.get_raw_connection()
                driver_connection = raw_connection.driver_connection
                self._prepared = await driver_connection.prepare(
                    str(stmt.compile(dialect=conn.dialect))
                )
        except (SQLAlchemyError, PostgresError, OSError) as e:
            self._prepared = None
            raise StorageException(
                f"Unable to set up the files table: {e}"
            ) from e
        self._insert_stmt = stmt
        logger.debug("Files table ready")

    async def insert(
        self, filename: str, mime_type: str, size: int, content: bytes
    ) -> int:
        """Store one file in a single statement and return its new id."""
        if self._insert_stmt is None:
            raise RuntimeError(
                "The files repository is not set up. This is likely to be a programming error."
            )
        try:
            async with self.db.engine.begin() as conn:
                result = await conn.execute(
                    self._insert_stmt,
                    {
                        "filename": filename,
                        "mime_type": mime_type,
                        "size": size,
                        "content": content,
                    },
                )
                return result.scalar_one()
        except (SQLAlchemyError, OSError) as e:
            raise StorageException(f"Unable to insert the file: {e}") from e

    async def close(self) -> None:
        # asyncpg deallocates the server side statement once the handle is
        # released.
        self._prepared = None
        self._insert_stmt = None
        logger.debug("Files repository closed")
