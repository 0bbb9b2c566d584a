from __future__ import annotations

import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage

from fms.exceptions import StorageError

logger = logging.getLogger(__name__)


class GcsStorage:
    name = "gcs"

    def __init__(
        self,
        bucket: str,
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ) -> None:
        self.bucket_name = bucket
        if client is None:
            if credentials_path:
                client = storage.Client.from_service_account_json(credentials_path, project=project_id)
            else:
                # Application default credentials
                client = storage.Client(project=project_id)
        self.client = client
        self.bucket = client.bucket(bucket)

    def write(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        blob = self.bucket.blob(key)
        try:
            blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
        except GoogleAPIError as e:
            raise StorageError(f"Failed to upload {key} to GCS: {e}", {"bucket": self.bucket_name, "key": key}) from e
        return key

    def read(self, key: str) -> Optional[bytes]:
        try:
            return self.bucket.blob(key).download_as_bytes()
        except NotFound:
            return None
        except GoogleAPIError as e:
            raise StorageError(f"Failed to download {key} from GCS: {e}", {"bucket": self.bucket_name, "key": key}) from e

    def delete(self, key: str) -> bool:
        try:
            self.bucket.blob(key).delete()
        except NotFound:
            return False
        except GoogleAPIError as e:
            logger.error(f"Error deleting {key} from GCS: {e}")
            return False
        return True

    def exists(self, key: str) -> bool:
        try:
            return self.bucket.blob(key).exists()
        except GoogleAPIError as e:
            raise StorageError(f"Failed to check {key} in GCS: {e}", {"bucket": self.bucket_name, "key": key}) from e


__all__ = ["GcsStorage"]
