"""Storage abstraction: local filesystem or an object store, chosen at startup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from fms.config import Settings
from fms.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    name: str

    def write(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:  # returns key
        ...

    def read(self, key: str) -> Optional[bytes]:  # None if missing
        ...

    def delete(self, key: str) -> bool:
        ...

    def exists(self, key: str) -> bool:
        ...


def create_storage(settings: Settings) -> StorageBackend:
    """Instantiate the backend named by ``settings.provider``."""
    provider = settings.provider
    logger.info(f"Initializing storage provider: {provider}")

    if provider == "local":
        from fms.storage.local import LocalStorage

        return LocalStorage(Path(settings.local.base_path))

    if provider == "s3":
        from fms.storage.s3 import S3Storage

        s3 = settings.s3
        if not s3.bucket_name:
            raise ConfigurationError("S3 bucket name not set", {"setting": "FMS_S3_BUCKET"})
        return S3Storage(
            bucket=s3.bucket_name,
            prefix=s3.prefix,
            region=s3.region,
            access_key=s3.access_key,
            secret_key=s3.secret_key,
        )

    if provider == "minio":
        from fms.storage.minio import MinioStorage

        minio = settings.minio
        if not minio.endpoint or not minio.bucket_name:
            raise ConfigurationError(
                "MinIO endpoint and bucket must be set",
                {"settings": ["FMS_MINIO_ENDPOINT", "FMS_MINIO_BUCKET"]},
            )
        return MinioStorage(
            endpoint=minio.endpoint,
            bucket=minio.bucket_name,
            access_key=minio.access_key,
            secret_key=minio.secret_key,
        )

    if provider == "azure":
        from fms.storage.azure import AzureBlobStorage

        azure = settings.azure
        if not azure.connection_string or not azure.container_name:
            raise ConfigurationError(
                "Azure connection string and container must be set",
                {"settings": ["FMS_AZURE_CONNECTION_STRING", "FMS_AZURE_CONTAINER"]},
            )
        return AzureBlobStorage(azure.connection_string, azure.container_name)

    if provider == "gcs":
        from fms.storage.gcs import GcsStorage

        gcs = settings.gcs
        if not gcs.bucket_name:
            raise ConfigurationError("GCS bucket name not set", {"setting": "FMS_GCS_BUCKET"})
        return GcsStorage(
            bucket=gcs.bucket_name,
            project_id=gcs.project_id,
            credentials_path=gcs.credentials_path,
        )

    raise ConfigurationError(f"Unknown storage provider: {provider}", {"provider": provider})


__all__ = ["StorageBackend", "create_storage"]
