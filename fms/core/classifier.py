"""
Content type classification.

Decides whether a declared MIME type is an image, whether the image format is
one we can process, and whether the content is text-like.
"""
from typing import Iterable, Optional

# Formats the image processor can decode and re-encode. Configuration may
# narrow this list but never extend it.
SUPPORTED_IMAGE_FORMATS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp"})


def extract_format(content_type: Optional[str]) -> str:
    """Return the lower-cased subtype of a MIME type ('' if there is none)."""
    if not content_type or "/" not in content_type:
        return ""
    return content_type[content_type.index("/") + 1:].strip().lower()


class ContentClassifier:
    """Stateless MIME type checks."""

    def is_image(self, content_type: Optional[str]) -> bool:
        return bool(content_type) and content_type.strip().lower().startswith("image/")

    def is_supported_image_format(self, content_type: Optional[str], allowed_formats: Iterable[str]) -> bool:
        if not self.is_image(content_type):
            return False

        fmt = extract_format(content_type)
        allowed = {f.lower() for f in allowed_formats}
        return fmt in allowed and fmt in SUPPORTED_IMAGE_FORMATS

    def is_text_like(self, content_type: Optional[str]) -> bool:
        if not content_type:
            return False
        return (
            content_type.startswith("text/")
            or "json" in content_type
            or "xml" in content_type
            or "csv" in content_type
        )
