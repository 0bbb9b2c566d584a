from __future__ import annotations

import logging
from typing import Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from fms.exceptions import StorageError

logger = logging.getLogger(__name__)


class AzureBlobStorage:
    name = "azure"

    def __init__(
        self,
        connection_string: str,
        container: str,
        service: Optional[BlobServiceClient] = None,
    ) -> None:
        self.container = container
        self.service = service or BlobServiceClient.from_connection_string(connection_string)
        self._container_checked = False

    def _ensure_container(self) -> None:
        if self._container_checked:
            return
        try:
            self.service.create_container(self.container)
        except ResourceExistsError:
            pass
        self._container_checked = True

    def write(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        try:
            self._ensure_container()
            bc = self.service.get_blob_client(container=self.container, blob=key)
            kwargs = {}
            if content_type:
                kwargs["content_settings"] = ContentSettings(content_type=content_type)
            bc.upload_blob(data, overwrite=True, **kwargs)
        except AzureError as e:
            raise StorageError(f"Failed to upload {key} to Azure: {e}", {"container": self.container, "key": key}) from e
        return key

    def read(self, key: str) -> Optional[bytes]:
        bc = self.service.get_blob_client(container=self.container, blob=key)
        try:
            return bc.download_blob().readall()
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise StorageError(f"Failed to download {key} from Azure: {e}", {"container": self.container, "key": key}) from e

    def delete(self, key: str) -> bool:
        bc = self.service.get_blob_client(container=self.container, blob=key)
        try:
            bc.delete_blob()
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            logger.error(f"Error deleting {key} from Azure: {e}")
            return False
        return True

    def exists(self, key: str) -> bool:
        bc = self.service.get_blob_client(container=self.container, blob=key)
        try:
            return bc.exists()
        except AzureError as e:
            raise StorageError(f"Failed to check {key} in Azure: {e}", {"container": self.container, "key": key}) from e


__all__ = ["AzureBlobStorage"]
