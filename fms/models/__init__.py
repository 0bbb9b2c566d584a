"""
Data models for the file management API.

This module provides Pydantic models for request/response validation and
documentation.
"""
from fms.models.base import (
    BaseMetrics,
    BaseQualityMetrics
)

from fms.models.files import (
    FileInfo,
    FileUpdateRequest,
    FileUploadRequest,
    FileDownload
)

from fms.models.processing import (
    RecommendationResponse,
    ImageMetadataResponse,
    AnalysisResponse
)

__all__ = [
    # Base models
    'BaseMetrics',
    'BaseQualityMetrics',

    # File models
    'FileInfo',
    'FileUpdateRequest',
    'FileUploadRequest',
    'FileDownload',

    # Processing models
    'RecommendationResponse',
    'ImageMetadataResponse',
    'AnalysisResponse'
]
