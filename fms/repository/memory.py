from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Optional

from fms.repository import FileRecord


class InMemoryFileRepository:
    """Dict-backed repository; contents are lost on restart."""

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: FileRecord) -> FileRecord:
        with self._lock:
            self._records[record.id] = replace(record)
        return record

    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        with self._lock:
            record = self._records.get(file_id)
            return replace(record) if record else None

    def find_all(self) -> List[FileRecord]:
        with self._lock:
            return [replace(r) for r in self._records.values()]

    def find_by_file_type(self, file_type: str) -> List[FileRecord]:
        return [r for r in self.find_all() if r.file_type == file_type]

    def find_by_provider(self, provider: str) -> List[FileRecord]:
        return [r for r in self.find_all() if r.provider == provider]

    def delete_by_id(self, file_id: str) -> bool:
        with self._lock:
            return self._records.pop(file_id, None) is not None

    def exists_by_id_and_provider(self, file_id: str, provider: str) -> bool:
        with self._lock:
            record = self._records.get(file_id)
            return record is not None and record.provider == provider


__all__ = ["InMemoryFileRepository"]
