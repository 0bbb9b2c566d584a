"""
Models for processing analysis and compression recommendations.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from fms.models.base import BaseMetrics, BaseQualityMetrics


class RecommendationResponse(BaseModel):
    """Compression recommendation for a content type and size"""
    content_type: str
    file_size: int
    recommended: bool
    reason: str
    expected_savings: float = Field(..., description="Expected fractional size reduction (0-1)")
    method: str


class ImageMetadataResponse(BaseModel):
    width: int
    height: int
    size_in_bytes: int
    has_alpha: bool
    aspect_ratio: float
    pixel_count: int


class AnalysisResponse(BaseMetrics, BaseQualityMetrics):
    """Result of running the processing pipeline without storing the file"""
    file_name: str
    content_type: str
    was_processed: bool
    method: str
    original_size: int
    processed_size: int
    thumbnail_size: Optional[int] = None
    total_saved_bytes: int
    compression_ratio: float = Field(..., description="Compression ratio (original_size / processed_size)")
    space_savings_percent: float = Field(..., description="Percentage of space saved")
    compression_speed_mbps: float = Field(..., description="Processing throughput over the original size (MB/s)")
    processing_time: float = Field(..., description="Time taken for processing in seconds")
    reason: Optional[str] = Field(None, description="Why nothing was applied, if applicable")
    image_metadata: Optional[ImageMetadataResponse] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
