"""
Value types shared by the content-processing components.

All of them are immutable; a new instance is built for every request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

IMAGE_OPTIMIZATION = "IMAGE_OPTIMIZATION"


class CompressionMethod(str, Enum):
    NONE = "NONE"
    GENERIC = "GENERIC"
    CONTAINER_OPTIMIZATION = "CONTAINER_OPTIMIZATION"


@dataclass(frozen=True)
class ProcessingRequest:
    """One upload as handed to the pipeline."""
    data: bytes
    content_type: str
    file_name: str = ""
    do_image_compress: bool = True
    do_thumbnail: bool = True
    do_generic_compress: bool = True
    thumbnail_width: int = 200
    thumbnail_height: int = 200
    image_quality: float = 0.8


@dataclass(frozen=True)
class CompressionOutcome:
    """
    Result of a single generic or container compression attempt.

    When ``applied`` is False, ``data`` is the input, ``compressed_size`` equals
    ``original_size`` and nothing was saved.
    """
    data: bytes
    original_size: int
    compressed_size: int
    applied: bool
    method: CompressionMethod = CompressionMethod.NONE
    reason: Optional[str] = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def not_applied(cls, data: bytes, reason: str) -> "CompressionOutcome":
        size = len(data) if data else 0
        return cls(
            data=data if data is not None else b"",
            original_size=size,
            compressed_size=size,
            applied=False,
            method=CompressionMethod.NONE,
            reason=reason,
        )

    @property
    def saved_bytes(self) -> int:
        return self.original_size - self.compressed_size if self.applied else 0

    @property
    def savings_ratio(self) -> float:
        if not self.applied or self.original_size <= 0:
            return 0.0
        return self.saved_bytes / self.original_size


@dataclass(frozen=True)
class CompressionRecommendation:
    recommended: bool
    reason: str
    expected_savings: float
    method: CompressionMethod


@dataclass(frozen=True)
class ImageMetadata:
    width: int
    height: int
    size_in_bytes: int
    has_alpha: bool

    @property
    def aspect_ratio(self) -> float:
        return 0.0 if self.height == 0 else self.width / self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class ProcessingOutcome:
    """
    Aggregate result of running the pipeline over one upload.

    ``processed_data`` is what should be stored; it is the original payload
    whenever nothing was applied.
    """
    processed_data: bytes
    thumbnail_data: Optional[bytes] = None
    compression: Optional[CompressionOutcome] = None
    image_metadata: Optional[ImageMetadata] = None
    was_processed: bool = False
    method: str = CompressionMethod.NONE.value
    metadata: Mapping[str, Any] = field(default_factory=dict)
    total_saved_bytes: int = 0

    @classmethod
    def not_processed(cls, data: bytes, reason: str) -> "ProcessingOutcome":
        return cls(
            processed_data=data if data is not None else b"",
            metadata={"reason": reason},
        )

    @property
    def reason(self) -> Optional[str]:
        return self.metadata.get("reason")

    def summary(self) -> Dict[str, Any]:
        """Plain dict view used by API responses and logs."""
        return {
            "was_processed": self.was_processed,
            "method": self.method,
            "original_size": self.metadata.get("original_size", len(self.processed_data)),
            "processed_size": len(self.processed_data),
            "thumbnail_size": len(self.thumbnail_data) if self.thumbnail_data else None,
            "total_saved_bytes": self.total_saved_bytes,
            "reason": self.reason,
        }
