"""
Per-upload processing pipeline.

Classifies the upload, runs image optimization / thumbnail generation for
images or generic compression for everything else, and aggregates the result.
The pipeline never raises: anything unexpected becomes a "not processed"
outcome and the file is stored as uploaded.
"""
import logging
from typing import Any, Dict, Optional

from fms.config import Settings
from fms.core.classifier import ContentClassifier
from fms.core.compression import GenericCompressor
from fms.core.image import ImageProcessor
from fms.core.types import (
    IMAGE_OPTIMIZATION,
    CompressionMethod,
    CompressionOutcome,
    ImageMetadata,
    ProcessingOutcome,
    ProcessingRequest,
)

logger = logging.getLogger(__name__)


class ProcessingPipeline:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        classifier: Optional[ContentClassifier] = None,
        image_processor: Optional[ImageProcessor] = None,
        compressor: Optional[GenericCompressor] = None,
    ):
        self.settings = settings or Settings()
        image_settings = self.settings.image
        self.classifier = classifier or ContentClassifier()
        self.image_processor = image_processor or ImageProcessor(
            quality=image_settings.compression.quality,
            thumbnail_size=(image_settings.thumbnail.width, image_settings.thumbnail.height),
        )
        self.compressor = compressor or GenericCompressor(
            min_savings=self.settings.compression.min_savings_threshold,
            max_file_size=self.settings.compression.max_file_size_bytes,
        )

    def build_request(
        self,
        data: bytes,
        content_type: str,
        file_name: str = "",
        compress_image: bool = True,
        generate_thumbnail: bool = True,
        compress: bool = True,
    ) -> ProcessingRequest:
        """Request with thumbnail box and quality taken from settings."""
        image_settings = self.settings.image
        return ProcessingRequest(
            data=data,
            content_type=content_type,
            file_name=file_name,
            do_image_compress=compress_image,
            do_thumbnail=generate_thumbnail,
            do_generic_compress=compress,
            thumbnail_width=image_settings.thumbnail.width,
            thumbnail_height=image_settings.thumbnail.height,
            image_quality=image_settings.compression.quality,
        )

    def process(self, request: ProcessingRequest) -> ProcessingOutcome:
        """
        Run every enabled step for one upload.

        Args:
            request: Upload payload and per-request toggles

        Returns:
            ProcessingOutcome; ``processed_data`` is the original payload when
            nothing was applied or processing failed
        """
        data = request.data
        if not data:
            return ProcessingOutcome.not_processed(b"", "empty file")

        try:
            return self._process(request)
        except Exception as e:
            logger.error(f"Error processing file {request.file_name}: {e}", exc_info=True)
            return ProcessingOutcome.not_processed(data, f"processing failed: {e}")

    def _process(self, request: ProcessingRequest) -> ProcessingOutcome:
        original = request.data
        processed = original
        thumbnail: Optional[bytes] = None
        compression: Optional[CompressionOutcome] = None
        image_metadata: Optional[ImageMetadata] = None
        method = CompressionMethod.NONE.value
        total_saved = 0
        meta: Dict[str, Any] = {
            "image_optimized": False,
            "thumbnail_generated": False,
            "compression_applied": False,
        }

        image_settings = self.settings.image

        if self.classifier.is_image(request.content_type):
            image_metadata = self.image_processor.metadata(original)

            if request.do_image_compress and image_settings.compression.enabled:
                processed = self.image_processor.compress(
                    original, request.content_type, quality=request.image_quality
                )
                if processed != original:
                    method = IMAGE_OPTIMIZATION
                    total_saved += len(original) - len(processed)
                    meta["image_optimized"] = True

            if request.do_thumbnail and image_settings.thumbnail.enabled:
                thumbnail = self.image_processor.thumbnail(
                    original,
                    request.content_type,
                    width=request.thumbnail_width,
                    height=request.thumbnail_height,
                )
                if thumbnail is not None:
                    meta["thumbnail_generated"] = True
                    meta["thumbnail_size"] = len(thumbnail)

        elif request.do_generic_compress and self.settings.compression.enabled:
            compression = self.compressor.compress(processed, request.content_type, request.file_name)
            if compression.applied:
                processed = compression.data
                total_saved += compression.saved_bytes
                if method == CompressionMethod.NONE.value:
                    method = compression.method.value
                else:
                    method = f"{method}_{compression.method.value}"
                meta["compression_applied"] = True
                meta["compression_method"] = compression.method.value

        meta["original_size"] = len(original)
        meta["processed_size"] = len(processed)
        meta["total_saved_bytes"] = total_saved

        logger.debug(
            f"Processed {request.file_name or 'upload'}: {len(original)} -> {len(processed)} bytes, "
            f"method={method}"
        )

        return ProcessingOutcome(
            processed_data=processed,
            thumbnail_data=thumbnail,
            compression=compression,
            image_metadata=image_metadata,
            was_processed=processed != original or thumbnail is not None,
            method=method,
            metadata=meta,
            total_saved_bytes=total_saved,
        )
