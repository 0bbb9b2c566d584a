"""
File storage service.

Runs uploads through the processing pipeline, writes the resulting payload (and
thumbnail) to the configured storage backend and keeps a metadata record per
file. Downloads reverse any generic compression applied at upload time.
"""
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from fms.config import Settings
from fms.core.classifier import ContentClassifier
from fms.core.pipeline import ProcessingPipeline
from fms.core.types import ProcessingOutcome
from fms.models.files import FileDownload, FileInfo, FileUploadRequest
from fms.repository import FileRecord, FileRepository
from fms.storage import StorageBackend
from fms.utils.file_handling import (
    THUMBNAIL_PREFIX,
    build_storage_key,
    generate_file_name,
    new_file_id,
    sanitize_segment,
    thumbnail_key,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FileStorageService:
    def __init__(
        self,
        settings: Settings,
        storage: StorageBackend,
        repository: FileRepository,
        pipeline: Optional[ProcessingPipeline] = None,
    ):
        self.settings = settings
        self.storage = storage
        self.repository = repository
        self.pipeline = pipeline or ProcessingPipeline(settings)
        self.classifier = ContentClassifier()

    @property
    def provider_name(self) -> str:
        return self.storage.name

    def process(self, request: FileUploadRequest) -> ProcessingOutcome:
        """Run the pipeline for an upload without storing anything."""
        supported = self.classifier.is_supported_image_format(
            request.content_type, self.settings.image.allowed_formats
        )
        processing_request = self.pipeline.build_request(
            data=request.content,
            content_type=request.content_type,
            file_name=request.file_name,
            compress_image=request.compress_image and supported,
            generate_thumbnail=request.generate_thumbnail and supported,
            compress=request.compress,
        )
        return self.pipeline.process(processing_request)

    def upload_file(self, request: FileUploadRequest) -> FileInfo:
        """
        Process and store an uploaded file.

        Raises:
            StorageError: If the backend fails to write the payload
        """
        file_id = new_file_id()
        file_type = sanitize_segment(request.file_type)
        file_name = generate_file_name(file_id, request.file_name)

        outcome = self.process(request)
        if not outcome.was_processed and outcome.reason:
            logger.info(f"Storing {request.file_name} as uploaded: {outcome.reason}")

        key = self.storage.write(
            build_storage_key(file_type, file_name), outcome.processed_data, request.content_type
        )

        thumb_path = None
        if outcome.thumbnail_data is not None:
            thumb_path = self.storage.write(
                thumbnail_key(file_type, file_name), outcome.thumbnail_data, request.content_type
            )

        compression_method = None
        if outcome.compression is not None and outcome.compression.applied:
            compression_method = outcome.compression.method.value

        now = _now()
        record = FileRecord(
            id=file_id,
            file_name=file_name,
            original_file_name=request.file_name,
            content_type=request.content_type,
            size=len(outcome.processed_data),
            path=key,
            thumbnail_path=thumb_path,
            created_at=now,
            updated_at=now,
            is_image=self.classifier.is_image(request.content_type),
            provider=self.provider_name,
            file_type=file_type,
            compression_method=compression_method,
        )
        self.repository.save(record)

        logger.info(
            f"Uploaded {request.file_name} as {file_id} ({len(request.content)} -> "
            f"{record.size} bytes, method={outcome.method})"
        )
        return FileInfo.model_validate(record)

    def download_file(self, file_id: str) -> Optional[FileDownload]:
        record = self.repository.find_by_id(file_id)
        if record is None:
            return None

        content = self.storage.read(record.path)
        if content is None:
            logger.warning(f"Payload for {file_id} missing from {self.provider_name} storage")
            return None

        if record.compression_method:
            content = self.pipeline.compressor.decompress(content, record.compression_method)

        return FileDownload(
            file_name=record.original_file_name,
            content_type=record.content_type,
            content=content,
            size=len(content),
        )

    def get_file_info(self, file_id: str) -> Optional[FileInfo]:
        record = self.repository.find_by_id(file_id)
        return FileInfo.model_validate(record) if record else None

    def update_file_info(self, file_id: str, original_file_name: str) -> Optional[FileInfo]:
        record = self.repository.find_by_id(file_id)
        if record is None:
            return None

        updated = replace(record, original_file_name=original_file_name, updated_at=_now())
        self.repository.save(updated)
        return FileInfo.model_validate(updated)

    def delete_file(self, file_id: str) -> bool:
        record = self.repository.find_by_id(file_id)
        if record is None:
            return False

        self.storage.delete(record.path)
        if record.thumbnail_path:
            self.storage.delete(record.thumbnail_path)

        self.repository.delete_by_id(file_id)
        logger.info(f"File deleted successfully: {file_id}")
        return True

    def get_thumbnail(self, file_id: str) -> Optional[FileDownload]:
        record = self.repository.find_by_id(file_id)
        if record is None or not record.thumbnail_path:
            return None

        content = self.storage.read(record.thumbnail_path)
        if content is None:
            return None

        return FileDownload(
            file_name=f"{THUMBNAIL_PREFIX}{record.original_file_name}",
            content_type=record.content_type,
            content=content,
            size=len(content),
        )

    def list_files(self) -> List[FileInfo]:
        return [FileInfo.model_validate(r) for r in self.repository.find_all()]

    def file_exists(self, file_id: str) -> bool:
        return self.repository.exists_by_id_and_provider(file_id, self.provider_name)
