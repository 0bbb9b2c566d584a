from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fms.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    name = "local"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        root = self.root.resolve()
        path = (root / key).resolve()
        if path != root and root not in path.parents:
            raise StorageError(f"Key escapes storage root: {key}", {"key": key})
        return path

    def write(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}", {"key": key}) from e
        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return key

    def read(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}", {"key": key}) from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Error deleting {path}: {e}")
            return False
        return True

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()


__all__ = ["LocalStorage"]
