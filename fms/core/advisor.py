"""
Compression recommendations.

Estimates how much a file of a given type would shrink without touching its
bytes, so callers can decide up front whether compression is worth it.
"""
import logging
from typing import Optional

from fms.core.classifier import ContentClassifier
from fms.core.types import CompressionMethod, CompressionRecommendation

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Already-compressed media and archives; compressing them again is wasted work
NON_COMPRESSIBLE_TYPES = frozenset({
    "image/jpeg", "image/png", "image/gif", "image/webp",
    "video/mp4", "video/avi", "video/mkv",
    "audio/mp3", "audio/aac", "audio/ogg",
    "application/zip", "application/rar", "application/7z",
    "application/gzip", "application/x-tar",
})

_EXPECTED_SAVINGS = {
    "text/plain": 0.70,
    "text/html": 0.70,
    "text/css": 0.70,
    "application/json": 0.80,
    "application/xml": 0.80,
    PDF_CONTENT_TYPE: 0.25,
    DOCX_CONTENT_TYPE: 0.60,
}
TEXT_LIKE_SAVINGS = 0.50
DEFAULT_SAVINGS = 0.20


class CompressionAdvisor:
    def __init__(
        self,
        min_savings_threshold: float = 0.15,
        max_file_size: int = 100 * 1024 * 1024,
        classifier: Optional[ContentClassifier] = None,
    ):
        self.min_savings_threshold = min_savings_threshold
        self.max_file_size = max_file_size
        self.classifier = classifier or ContentClassifier()

    def estimate_savings(self, content_type: Optional[str]) -> float:
        """Expected fractional size reduction for a content type."""
        if content_type in _EXPECTED_SAVINGS:
            return _EXPECTED_SAVINGS[content_type]
        return TEXT_LIKE_SAVINGS if self.classifier.is_text_like(content_type) else DEFAULT_SAVINGS

    def recommend(self, content_type: Optional[str], file_size: int) -> CompressionRecommendation:
        """
        Recommend a compression method for a file.

        Args:
            content_type: Declared MIME type
            file_size: Size of the file in bytes

        Returns:
            CompressionRecommendation; ``recommended`` is True only when the
            expected savings strictly exceed the configured threshold
        """
        if file_size > self.max_file_size:
            return CompressionRecommendation(
                recommended=False,
                reason="file too large",
                expected_savings=0.0,
                method=CompressionMethod.NONE,
            )

        if content_type in NON_COMPRESSIBLE_TYPES:
            return CompressionRecommendation(
                recommended=False,
                reason="file type already compressed",
                expected_savings=0.0,
                method=CompressionMethod.NONE,
            )

        if content_type == PDF_CONTENT_TYPE:
            method = CompressionMethod.CONTAINER_OPTIMIZATION
        else:
            method = CompressionMethod.GENERIC

        expected = self.estimate_savings(content_type)
        logger.debug(f"Expected savings for {content_type}: {expected:.2f}")

        return CompressionRecommendation(
            recommended=expected > self.min_savings_threshold,
            reason=f"expected {expected * 100:.1f}% reduction",
            expected_savings=expected,
            method=method,
        )
