from __future__ import annotations

import io
import logging
from typing import Optional

from minio import Minio
from minio.error import S3Error

from fms.exceptions import StorageError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "NoSuchObject"}


class MinioStorage:
    name = "minio"

    def __init__(
        self,
        endpoint: str,
        bucket: str,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        client: Optional[Minio] = None,
    ) -> None:
        self.bucket = bucket
        if client is None:
            # Minio wants host:port (no scheme)
            host = endpoint.replace("http://", "").replace("https://", "").strip("/")
            client = Minio(
                endpoint=host,
                access_key=access_key,
                secret_key=secret_key,
                secure=endpoint.startswith("https"),
            )
        self.client = client
        self._bucket_checked = False

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            logger.info(f"Creating MinIO bucket {self.bucket}")
            self.client.make_bucket(self.bucket)
        self._bucket_checked = True

    def write(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        try:
            self._ensure_bucket()
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise StorageError(f"Failed to upload {key} to MinIO: {e}", {"bucket": self.bucket, "key": key}) from e
        return key

    def read(self, key: str) -> Optional[bytes]:
        try:
            resp = self.client.get_object(self.bucket, key)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return None
            raise StorageError(f"Failed to download {key} from MinIO: {e}", {"bucket": self.bucket, "key": key}) from e
        try:
            return resp.read()
        finally:
            resp.close()
            resp.release_conn()

    def delete(self, key: str) -> bool:
        try:
            self.client.remove_object(self.bucket, key)
        except S3Error as e:
            logger.error(f"Error deleting {key} from MinIO: {e}")
            return False
        return True

    def exists(self, key: str) -> bool:
        try:
            self.client.stat_object(self.bucket, key)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return False
            raise StorageError(f"Failed to check {key} in MinIO: {e}", {"bucket": self.bucket, "key": key}) from e
        return True


__all__ = ["MinioStorage"]
