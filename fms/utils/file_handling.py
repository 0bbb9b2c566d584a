"""
Helpers for naming stored files and building storage keys.
"""
import os
import re
import uuid
from typing import Optional

DEFAULT_FILE_TYPE = "documents"
THUMBNAIL_PREFIX = "thumb_"

_SAFE_SEGMENT = re.compile(r"[^A-Za-z0-9_.-]+")


def new_file_id() -> str:
    """Generate a unique identifier for an uploaded file."""
    return str(uuid.uuid4())


def generate_file_name(file_id: str, original_file_name: Optional[str]) -> str:
    """
    Stored file name: the file ID plus the original extension, if any.

    Example:
        generate_file_name("abc", "photo.JPG") -> "abc.JPG"
    """
    extension = ""
    if original_file_name:
        extension = os.path.splitext(os.path.basename(original_file_name))[1]
    return f"{file_id}{extension}"


def sanitize_segment(value: Optional[str], default: str = DEFAULT_FILE_TYPE) -> str:
    """Make a value safe to use as a single storage key segment."""
    cleaned = _SAFE_SEGMENT.sub("_", (value or "").strip()).strip("._")
    return cleaned or default


def build_storage_key(file_type: Optional[str], file_name: str) -> str:
    """Storage key for a file: ``<file_type>/<file_name>``."""
    return f"{sanitize_segment(file_type)}/{file_name}"


def thumbnail_key(file_type: Optional[str], file_name: str) -> str:
    """Storage key for a file's thumbnail."""
    return build_storage_key(file_type, f"{THUMBNAIL_PREFIX}{file_name}")
