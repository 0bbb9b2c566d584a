"""
File metadata repositories.

One record per stored file. ``create_repository`` picks the in-memory variant
(non-durable) or the SQLite variant according to settings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol

from fms.config import Settings
from fms.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class FileRecord:
    id: str
    file_name: str
    original_file_name: str
    content_type: str
    size: int
    path: str
    created_at: datetime
    updated_at: datetime
    is_image: bool
    provider: str
    file_type: str
    thumbnail_path: Optional[str] = None
    compression_method: Optional[str] = None


class FileRepository(Protocol):
    def save(self, record: FileRecord) -> FileRecord:
        ...

    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        ...

    def find_all(self) -> List[FileRecord]:
        ...

    def find_by_file_type(self, file_type: str) -> List[FileRecord]:
        ...

    def find_by_provider(self, provider: str) -> List[FileRecord]:
        ...

    def delete_by_id(self, file_id: str) -> bool:
        ...

    def exists_by_id_and_provider(self, file_id: str, provider: str) -> bool:
        ...


def create_repository(settings: Settings) -> FileRepository:
    backend = settings.metadata.backend.strip().lower()
    logger.info(f"Initializing metadata repository: {backend}")

    if backend == "memory":
        from fms.repository.memory import InMemoryFileRepository

        return InMemoryFileRepository()

    if backend == "sqlite":
        from fms.repository.sqlite import SqliteFileRepository

        return SqliteFileRepository(Path(settings.metadata.db_path))

    raise ConfigurationError(f"Unknown metadata backend: {backend}", {"backend": backend})


__all__ = ["FileRecord", "FileRepository", "create_repository"]
