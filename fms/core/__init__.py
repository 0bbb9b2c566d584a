"""
Content-processing core of the file management service.

This package decides what to do with an upload before it is stored:
- ContentClassifier: image / text-like / supported-format checks
- CompressionAdvisor: up-front compression recommendations
- ImageProcessor: Pillow based re-encoding and thumbnails
- GenericCompressor: Zstandard and PDF container optimization
- ProcessingPipeline: per-upload orchestration of the above
"""
from fms.core.types import (
    IMAGE_OPTIMIZATION,
    CompressionMethod,
    CompressionOutcome,
    CompressionRecommendation,
    ImageMetadata,
    ProcessingOutcome,
    ProcessingRequest
)

from fms.core.classifier import (
    SUPPORTED_IMAGE_FORMATS,
    ContentClassifier,
    extract_format
)

from fms.core.advisor import (
    NON_COMPRESSIBLE_TYPES,
    PDF_CONTENT_TYPE,
    CompressionAdvisor
)

from fms.core.image import (
    MAX_IMAGE_WIDTH,
    MAX_IMAGE_HEIGHT,
    MIN_IMAGE_COMPRESSION_SAVINGS,
    ImageProcessor
)

from fms.core.compression import (
    MIN_COMPRESSION_SAVINGS,
    MAX_COMPRESSION_SIZE,
    GenericCompressor
)

from fms.core.pipeline import ProcessingPipeline

__all__ = [
    # Value types
    'IMAGE_OPTIMIZATION',
    'CompressionMethod',
    'CompressionOutcome',
    'CompressionRecommendation',
    'ImageMetadata',
    'ProcessingOutcome',
    'ProcessingRequest',

    # Classification and advice
    'SUPPORTED_IMAGE_FORMATS',
    'ContentClassifier',
    'extract_format',
    'NON_COMPRESSIBLE_TYPES',
    'PDF_CONTENT_TYPE',
    'CompressionAdvisor',

    # Processing
    'MAX_IMAGE_WIDTH',
    'MAX_IMAGE_HEIGHT',
    'MIN_IMAGE_COMPRESSION_SAVINGS',
    'ImageProcessor',
    'MIN_COMPRESSION_SAVINGS',
    'MAX_COMPRESSION_SIZE',
    'GenericCompressor',
    'ProcessingPipeline'
]
