"""Tests for storage backends and provider selection."""

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ResourceNotFoundError
from botocore.exceptions import ClientError
from google.api_core.exceptions import Forbidden, NotFound

from fms.config import GcsSettings, MinioSettings, S3Settings, Settings
from fms.exceptions import ConfigurationError, StorageError
from fms.storage import create_storage
from fms.storage.azure import AzureBlobStorage
from fms.storage.gcs import GcsStorage
from fms.storage.local import LocalStorage
from fms.storage.minio import MinioStorage
from fms.storage.s3 import S3Storage


@pytest.fixture
def local(tmp_path):
    return LocalStorage(tmp_path / "store")


def test_local_write_read_delete(local):
    key = local.write("documents/a.txt", b"hello", "text/plain")
    assert key == "documents/a.txt"
    assert local.exists(key)
    assert local.read(key) == b"hello"
    assert local.delete(key) is True
    assert not local.exists(key)
    assert local.delete(key) is False


def test_local_read_missing_returns_none(local):
    assert local.read("documents/missing.txt") is None


def test_local_rejects_keys_outside_root(local):
    with pytest.raises(StorageError):
        local.write("../escape.txt", b"x")
    with pytest.raises(StorageError):
        local.read("documents/../../escape.txt")


def test_local_overwrite(local):
    local.write("k", b"one")
    local.write("k", b"two")
    assert local.read("k") == b"two"


def _client_error(code, operation="GetObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_s3_round_trip_with_prefix():
    client = MagicMock()
    client.get_object.return_value = {"Body": BytesIO(b"data")}
    storage = S3Storage("bucket", prefix="/uploads/", client=client)

    storage.write("documents/a.txt", b"data", "text/plain")
    client.put_object.assert_called_once_with(
        Bucket="bucket", Key="uploads/documents/a.txt", Body=b"data", ContentType="text/plain"
    )
    assert storage.read("documents/a.txt") == b"data"
    client.get_object.assert_called_once_with(Bucket="bucket", Key="uploads/documents/a.txt")


def test_s3_missing_object():
    client = MagicMock()
    client.get_object.side_effect = _client_error("NoSuchKey")
    client.head_object.side_effect = _client_error("404", "HeadObject")
    storage = S3Storage("bucket", client=client)

    assert storage.read("nope") is None
    assert storage.exists("nope") is False


def test_s3_errors_become_storage_errors():
    client = MagicMock()
    client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
    client.get_object.side_effect = _client_error("AccessDenied")
    storage = S3Storage("bucket", client=client)

    with pytest.raises(StorageError):
        storage.write("a", b"x")
    with pytest.raises(StorageError):
        storage.read("a")


def test_s3_delete_failure_returns_false():
    client = MagicMock()
    client.delete_object.side_effect = _client_error("AccessDenied", "DeleteObject")
    assert S3Storage("bucket", client=client).delete("a") is False


def test_create_local_storage(settings):
    storage = create_storage(settings)
    assert isinstance(storage, LocalStorage)
    assert storage.name == "local"


def test_create_storage_requires_bucket():
    with pytest.raises(ConfigurationError):
        create_storage(Settings(provider="s3", s3=S3Settings()))
    with pytest.raises(ConfigurationError):
        create_storage(Settings(provider="minio", minio=MinioSettings(endpoint="localhost:9000")))
    with pytest.raises(ConfigurationError):
        create_storage(Settings(provider="azure"))


def test_unknown_provider():
    with pytest.raises(ConfigurationError):
        create_storage(Settings(provider="ftp"))


def test_minio_creates_bucket_once():
    client = MagicMock()
    client.bucket_exists.return_value = False
    storage = MinioStorage("localhost:9000", "files", client=client)

    storage.write("a", b"one", "text/plain")
    storage.write("b", b"two")
    client.make_bucket.assert_called_once_with("files")
    assert client.put_object.call_count == 2
    assert client.put_object.call_args.kwargs["length"] == 3
    assert client.put_object.call_args.kwargs["content_type"] == "application/octet-stream"


def test_minio_read_releases_connection():
    client = MagicMock()
    response = client.get_object.return_value
    response.read.return_value = b"data"
    storage = MinioStorage("localhost:9000", "files", client=client)

    assert storage.read("a") == b"data"
    response.close.assert_called_once()
    response.release_conn.assert_called_once()


def test_azure_round_trip():
    service = MagicMock()
    blob = service.get_blob_client.return_value
    blob.download_blob.return_value.readall.return_value = b"data"
    blob.exists.return_value = True
    storage = AzureBlobStorage("conn", "files", service=service)

    storage.write("a", b"data", "text/plain")
    service.create_container.assert_called_once_with("files")
    blob.upload_blob.assert_called_once()
    assert storage.read("a") == b"data"
    assert storage.exists("a") is True


def test_azure_missing_blob():
    service = MagicMock()
    blob = service.get_blob_client.return_value
    blob.download_blob.side_effect = ResourceNotFoundError(message="missing")
    blob.delete_blob.side_effect = ResourceNotFoundError(message="missing")
    storage = AzureBlobStorage("conn", "files", service=service)

    assert storage.read("a") is None
    assert storage.delete("a") is False


def test_s3_presigned_url_uses_prefixed_key():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://example/signed"
    storage = S3Storage("bucket", prefix="uploads", client=client)

    assert storage.get_presigned_url("a.txt", expires=60) == "https://example/signed"
    client.generate_presigned_url.assert_called_once_with(
        ClientMethod="get_object", Params={"Bucket": "bucket", "Key": "uploads/a.txt"}, ExpiresIn=60
    )


def test_gcs_round_trip():
    client = MagicMock()
    blob = client.bucket.return_value.blob.return_value
    blob.download_as_bytes.return_value = b"data"
    blob.exists.return_value = True
    storage = GcsStorage("files", client=client)

    assert storage.write("documents/a.txt", b"data", "text/plain") == "documents/a.txt"
    client.bucket.assert_called_once_with("files")
    blob.upload_from_string.assert_called_once_with(b"data", content_type="text/plain")
    assert storage.read("documents/a.txt") == b"data"
    assert storage.exists("documents/a.txt") is True
    assert storage.delete("documents/a.txt") is True


def test_gcs_missing_object():
    client = MagicMock()
    blob = client.bucket.return_value.blob.return_value
    blob.download_as_bytes.side_effect = NotFound("missing")
    blob.delete.side_effect = NotFound("missing")
    storage = GcsStorage("files", client=client)

    assert storage.read("a") is None
    assert storage.delete("a") is False


def test_gcs_errors_become_storage_errors():
    client = MagicMock()
    blob = client.bucket.return_value.blob.return_value
    blob.upload_from_string.side_effect = Forbidden("denied")
    blob.download_as_bytes.side_effect = Forbidden("denied")
    storage = GcsStorage("files", client=client)

    with pytest.raises(StorageError):
        storage.write("a", b"x")
    with pytest.raises(StorageError):
        storage.read("a")


def test_create_storage_requires_gcs_bucket():
    with pytest.raises(ConfigurationError):
        create_storage(Settings(provider="gcs", gcs=GcsSettings(project_id="proj")))
