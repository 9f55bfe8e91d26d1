#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

from uploadservicelayer.db.tables import FilesTable


def _compile(ddl) -> str:
    return " ".join(str(ddl.compile(dialect=postgresql.dialect())).split())


class TestFilesTable:
    def test_create_table(self):
        ddl = _compile(CreateTable(FilesTable))
        assert ddl.startswith("CREATE TABLE files (")
        assert "id SERIAL NOT NULL" in ddl
        assert "filename VARCHAR(255) NOT NULL" in ddl
        assert "mime_type VARCHAR(100) NOT NULL" in ddl
        assert "size BIGINT NOT NULL" in ddl
        assert "content BYTEA," in ddl
        assert "created_at TIMESTAMP WITHOUT TIME ZONE DEFAULT now()" in ddl
        assert "PRIMARY KEY (id)" in ddl

    def test_filename_index(self):
        (index,) = FilesTable.indexes
        assert not index.unique
        assert (
            _compile(CreateIndex(index))
            == "CREATE INDEX idx_files_filename ON files (filename)"
        )
