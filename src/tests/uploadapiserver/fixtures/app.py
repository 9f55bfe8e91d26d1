#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from dataclasses import dataclass
from typing import AsyncIterator

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
import pytest

from uploadapiserver.main import craft_app
from uploadapiserver.settings import Config
from uploadservicelayer.db import DatabaseConfig

AUTH_SECRET = "s3cret-t0ken"


@dataclass
class StoredRow:
    id: int
    filename: str
    mime_type: str
    size: int
    content: bytes


class FakeFilesRepository:
    """In-memory stand-in for FilesRepository, recording every insert."""

    def __init__(self):
        self.rows: list[StoredRow] = []
        self.insert_calls = 0
        # When set, the next insert raises it instead of storing the row.
        self.next_error: Exception | None = None

    async def insert(
        self, filename: str, mime_type: str, size: int, content: bytes
    ) -> int:
        self.insert_calls += 1
        if self.next_error is not None:
            error, self.next_error = self.next_error, None
            raise error
        row = StoredRow(
            id=len(self.rows) + 1,
            filename=filename,
            mime_type=mime_type,
            size=size,
            content=content,
        )
        self.rows.append(row)
        return row.id


@pytest.fixture
def test_config() -> Config:
    return Config(
        db=DatabaseConfig(name="filedb", host="localhost"),
        auth_secret=AUTH_SECRET,
        max_upload_size=1024,
    )


@pytest.fixture
def files_repository() -> FakeFilesRepository:
    return FakeFilesRepository()


@pytest.fixture
def api_app(
    test_config: Config, files_repository: FakeFilesRepository
) -> FastAPI:
    return craft_app(files_repository, test_config).fastapi_app


@pytest.fixture
async def api_client(api_app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=api_app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
async def authenticated_api_client(
    api_app: FastAPI,
) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=api_app),
        base_url="http://test",
        headers={"Authorization": AUTH_SECRET},
    ) as client:
        yield client
