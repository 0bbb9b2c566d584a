"""
Base models for the file management API.
These models define common fields reused across responses.
"""
from pydantic import BaseModel, Field
from typing import Optional


class BaseMetrics(BaseModel):
    """Base class for performance and resource metrics"""
    cpu_usage: float = Field(..., description="CPU usage during operation (%)")
    memory_usage: float = Field(..., description="Memory usage during operation (%)")


class BaseQualityMetrics(BaseModel):
    """Base class for image quality metrics"""
    psnr: Optional[float] = Field(
        None, description="Peak Signal-to-Noise Ratio between original and optimized images"
    )
    ssim: Optional[float] = Field(
        None,
        description="Structural Similarity Index between original and optimized images"
    )
