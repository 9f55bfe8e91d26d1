#  Copyright 2026 Canonical Ltd.  This software is licensed under the
#  GNU Affero General Public License version 3 (see the file LICENSE).

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    func,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
)

METADATA = MetaData()

FilesTable = Table(
    "files",
    METADATA,
    Column("id", Integer, primary_key=True),
    Column("filename", String(255), nullable=False),
    Column("mime_type", String(100), nullable=False),
    Column("size", BigInteger, nullable=False),
    Column("content", LargeBinary, nullable=True),
    Column("created_at", DateTime, server_default=func.now()),
    Index("idx_files_filename", "filename"),
)
