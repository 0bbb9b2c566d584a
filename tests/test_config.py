"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from fms.config import DEFAULT_ALLOWED_FORMATS, ImageSettings, Settings, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.provider == "local"
    assert settings.local.base_path == "./uploads"
    assert settings.compression.enabled is True
    assert settings.compression.min_savings_threshold == 0.15
    assert settings.compression.max_file_size_bytes == 100 * 1024 * 1024
    assert settings.image.compression.quality == 0.8
    assert (settings.image.thumbnail.width, settings.image.thumbnail.height) == (200, 200)
    assert settings.image.allowed_formats == DEFAULT_ALLOWED_FORMATS
    assert settings.metadata.backend == "memory"


def test_environment_overrides():
    settings = load_settings({
        "FMS_PROVIDER": " S3 ",
        "FMS_S3_BUCKET": "files",
        "FMS_S3_PREFIX": "prod",
        "FMS_COMPRESSION_ENABLED": "false",
        "FMS_COMPRESSION_MIN_SAVINGS": "0.3",
        "FMS_IMAGE_QUALITY": "0.5",
        "FMS_THUMBNAIL_WIDTH": "120",
        "FMS_THUMBNAIL_ENABLED": "no",
        "FMS_IMAGE_ALLOWED_FORMATS": "PNG, jpg,,",
        "FMS_METADATA_BACKEND": "sqlite",
    })
    assert settings.provider == "s3"
    assert settings.s3.bucket_name == "files"
    assert settings.s3.prefix == "prod"
    assert settings.compression.enabled is False
    assert settings.compression.min_savings_threshold == 0.3
    assert settings.image.compression.quality == 0.5
    assert settings.image.thumbnail.width == 120
    assert settings.image.thumbnail.height == 200
    assert settings.image.thumbnail.enabled is False
    assert settings.image.allowed_formats == {"png", "jpg"}
    assert settings.metadata.backend == "sqlite"


def test_gcs_settings_from_environment():
    settings = load_settings({
        "FMS_PROVIDER": "gcs",
        "FMS_GCS_PROJECT_ID": "proj",
        "FMS_GCS_BUCKET": "files",
        "FMS_GCS_CREDENTIALS_PATH": "/secrets/key.json",
    })
    assert settings.provider == "gcs"
    assert settings.gcs.project_id == "proj"
    assert settings.gcs.bucket_name == "files"
    assert settings.gcs.credentials_path == "/secrets/key.json"


def test_empty_values_are_ignored():
    assert load_settings({"FMS_PROVIDER": "", "FMS_IMAGE_QUALITY": ""}).provider == "local"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        load_settings({"FMS_IMAGE_QUALITY": "1.5"})
    with pytest.raises(ValidationError):
        load_settings({"FMS_THUMBNAIL_WIDTH": "0"})


def test_allowed_formats_from_list():
    assert ImageSettings(allowed_formats=["PNG", " gif "]).allowed_formats == {"png", "gif"}


def test_settings_constructed_directly():
    settings = Settings(provider="Local")
    assert settings.provider == "local"
