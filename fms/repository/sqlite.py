"""
SQLite-backed file metadata repository.

A connection is opened per operation so the repository can be shared across
request worker threads.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator, List, Optional

from fms.repository import FileRecord

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id", "file_name", "original_file_name", "content_type", "size", "path",
    "thumbnail_path", "created_at", "updated_at", "is_image", "provider",
    "file_type", "compression_method",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS files (
    id TEXT PRIMARY KEY,
    file_name TEXT NOT NULL,
    original_file_name TEXT NOT NULL,
    content_type TEXT NOT NULL,
    size INTEGER NOT NULL,
    path TEXT NOT NULL,
    thumbnail_path TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    is_image INTEGER NOT NULL,
    provider TEXT NOT NULL,
    file_type TEXT NOT NULL,
    compression_method TEXT
);
CREATE INDEX IF NOT EXISTS idx_file_type ON files (file_type);
CREATE INDEX IF NOT EXISTS idx_provider ON files (provider);
CREATE INDEX IF NOT EXISTS idx_created_at ON files (created_at);
"""


class SqliteFileRepository:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_conn() as conn:
            conn.executescript(_SCHEMA)
        logger.debug(f"Initialized {self.__class__.__name__} with db_path: {db_path}")

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(str(self.db_path), timeout=30.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _to_row(record: FileRecord) -> tuple:
        return (
            record.id,
            record.file_name,
            record.original_file_name,
            record.content_type,
            record.size,
            record.path,
            record.thumbnail_path,
            record.created_at.isoformat(),
            record.updated_at.isoformat(),
            int(record.is_image),
            record.provider,
            record.file_type,
            record.compression_method,
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> FileRecord:
        return FileRecord(
            id=row["id"],
            file_name=row["file_name"],
            original_file_name=row["original_file_name"],
            content_type=row["content_type"],
            size=row["size"],
            path=row["path"],
            thumbnail_path=row["thumbnail_path"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            is_image=bool(row["is_image"]),
            provider=row["provider"],
            file_type=row["file_type"],
            compression_method=row["compression_method"],
        )

    def _select(self, where: str = "", params: tuple = ()) -> List[FileRecord]:
        query = f"SELECT {', '.join(_COLUMNS)} FROM files {where} ORDER BY created_at"
        with self._get_conn() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._from_row(row) for row in rows]

    def save(self, record: FileRecord) -> FileRecord:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._get_conn() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO files ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                self._to_row(record),
            )
        return record

    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        records = self._select("WHERE id = ?", (file_id,))
        return records[0] if records else None

    def find_all(self) -> List[FileRecord]:
        return self._select()

    def find_by_file_type(self, file_type: str) -> List[FileRecord]:
        return self._select("WHERE file_type = ?", (file_type,))

    def find_by_provider(self, provider: str) -> List[FileRecord]:
        return self._select("WHERE provider = ?", (provider,))

    def delete_by_id(self, file_id: str) -> bool:
        with self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM files WHERE id = ?", (file_id,))
            return cursor.rowcount > 0

    def exists_by_id_and_provider(self, file_id: str, provider: str) -> bool:
        query = "SELECT 1 FROM files WHERE id = ? AND provider = ? LIMIT 1"
        with self._get_conn() as conn:
            return conn.execute(query, (file_id, provider)).fetchone() is not None


__all__ = ["SqliteFileRepository"]
