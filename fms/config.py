"""
Configuration for the file management service.

Settings are plain pydantic models so they can be built directly in tests and
passed down explicitly. ``load_settings`` fills them from ``FMS_*`` environment
variables; ``get_settings`` caches the result for the running process.
"""
import os
import logging
from functools import lru_cache
from typing import Mapping, Optional, Set

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_FORMATS = {"jpg", "jpeg", "png", "gif", "bmp", "webp"}
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024


class LocalSettings(BaseModel):
    """Local filesystem provider"""
    base_path: str = Field("./uploads", description="Root directory for stored files")


class S3Settings(BaseModel):
    """Amazon S3 provider"""
    bucket_name: Optional[str] = None
    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    prefix: str = ""


class MinioSettings(BaseModel):
    """MinIO provider"""
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    bucket_name: Optional[str] = None


class GcsSettings(BaseModel):
    """Google Cloud Storage provider"""
    project_id: Optional[str] = None
    bucket_name: Optional[str] = None
    credentials_path: Optional[str] = Field(None, description="Service account JSON key file")


class AzureSettings(BaseModel):
    """Azure Blob Storage provider"""
    connection_string: Optional[str] = None
    container_name: Optional[str] = None


class CompressionSettings(BaseModel):
    """Generic (non-image) compression"""
    enabled: bool = True
    min_savings_threshold: float = Field(0.15, ge=0.0, lt=1.0)
    max_file_size_bytes: int = Field(DEFAULT_MAX_FILE_SIZE, gt=0)


class ImageCompressionSettings(BaseModel):
    enabled: bool = True
    quality: float = Field(0.8, ge=0.0, le=1.0)


class ThumbnailSettings(BaseModel):
    enabled: bool = True
    width: int = Field(200, gt=0)
    height: int = Field(200, gt=0)


class ImageSettings(BaseModel):
    compression: ImageCompressionSettings = Field(default_factory=ImageCompressionSettings)
    thumbnail: ThumbnailSettings = Field(default_factory=ThumbnailSettings)
    allowed_formats: Set[str] = Field(default_factory=lambda: set(DEFAULT_ALLOWED_FORMATS))

    @field_validator("allowed_formats", mode="before")
    @classmethod
    def _split_formats(cls, value):
        if isinstance(value, str):
            value = [part for part in value.split(",")]
        return {str(part).strip().lower() for part in value if str(part).strip()}


class MetadataSettings(BaseModel):
    """Where file records are kept"""
    backend: str = Field("memory", description="'memory' or 'sqlite'")
    db_path: str = Field("./fms.db", description="SQLite database file (sqlite backend only)")


class Settings(BaseModel):
    """Top-level service settings"""
    provider: str = Field("local", description="local, s3, minio, azure or gcs")
    local: LocalSettings = Field(default_factory=LocalSettings)
    s3: S3Settings = Field(default_factory=S3Settings)
    minio: MinioSettings = Field(default_factory=MinioSettings)
    azure: AzureSettings = Field(default_factory=AzureSettings)
    gcs: GcsSettings = Field(default_factory=GcsSettings)
    compression: CompressionSettings = Field(default_factory=CompressionSettings)
    image: ImageSettings = Field(default_factory=ImageSettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)

    @field_validator("provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.strip().lower()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


# env var -> (section path, field, converter)
_ENV_FIELDS = {
    "FMS_PROVIDER": ((), "provider", str),
    "FMS_LOCAL_BASE_PATH": (("local",), "base_path", str),
    "FMS_S3_BUCKET": (("s3",), "bucket_name", str),
    "FMS_S3_REGION": (("s3",), "region", str),
    "FMS_S3_ACCESS_KEY": (("s3",), "access_key", str),
    "FMS_S3_SECRET_KEY": (("s3",), "secret_key", str),
    "FMS_S3_PREFIX": (("s3",), "prefix", str),
    "FMS_MINIO_ENDPOINT": (("minio",), "endpoint", str),
    "FMS_MINIO_ACCESS_KEY": (("minio",), "access_key", str),
    "FMS_MINIO_SECRET_KEY": (("minio",), "secret_key", str),
    "FMS_MINIO_BUCKET": (("minio",), "bucket_name", str),
    "FMS_AZURE_CONNECTION_STRING": (("azure",), "connection_string", str),
    "FMS_AZURE_CONTAINER": (("azure",), "container_name", str),
    "FMS_GCS_PROJECT_ID": (("gcs",), "project_id", str),
    "FMS_GCS_BUCKET": (("gcs",), "bucket_name", str),
    "FMS_GCS_CREDENTIALS_PATH": (("gcs",), "credentials_path", str),
    "FMS_COMPRESSION_ENABLED": (("compression",), "enabled", _as_bool),
    "FMS_COMPRESSION_MIN_SAVINGS": (("compression",), "min_savings_threshold", float),
    "FMS_COMPRESSION_MAX_FILE_SIZE": (("compression",), "max_file_size_bytes", int),
    "FMS_IMAGE_COMPRESSION_ENABLED": (("image", "compression"), "enabled", _as_bool),
    "FMS_IMAGE_QUALITY": (("image", "compression"), "quality", float),
    "FMS_THUMBNAIL_ENABLED": (("image", "thumbnail"), "enabled", _as_bool),
    "FMS_THUMBNAIL_WIDTH": (("image", "thumbnail"), "width", int),
    "FMS_THUMBNAIL_HEIGHT": (("image", "thumbnail"), "height", int),
    "FMS_IMAGE_ALLOWED_FORMATS": (("image",), "allowed_formats", str),
    "FMS_METADATA_BACKEND": (("metadata",), "backend", str),
    "FMS_METADATA_DB_PATH": (("metadata",), "db_path", str),
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        Validated Settings instance; unset variables keep their defaults
    """
    if environ is None:
        environ = os.environ

    data: dict = {}
    for env_name, (path, field, convert) in _ENV_FIELDS.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        section = data
        for part in path:
            section = section.setdefault(part, {})
        section[field] = convert(raw)
        logger.debug(f"Configuration override from {env_name}")

    return Settings(**data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once from the environment."""
    return load_settings()
