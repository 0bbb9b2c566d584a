"""
Models for stored file metadata.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    """Metadata for a stored file"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier for the file")
    file_name: str = Field(..., description="Name of the stored object")
    original_file_name: str = Field(..., description="File name as uploaded")
    content_type: str = Field(..., description="Declared MIME type")
    size: int = Field(..., description="Stored size in bytes")
    path: str = Field(..., description="Storage key of the payload")
    thumbnail_path: Optional[str] = Field(None, description="Storage key of the thumbnail, if any")
    created_at: datetime
    updated_at: datetime
    is_image: bool
    provider: str = Field(..., description="Storage provider holding the file")
    file_type: str = Field(..., description="Logical category, e.g. 'documents' or 'profile_picture'")
    compression_method: Optional[str] = Field(
        None, description="Compression applied to the stored payload, reversed on download"
    )


class FileUpdateRequest(BaseModel):
    """Fields a client may change on an existing file"""
    original_file_name: str = Field(..., min_length=1, description="New display name")


class FileUploadRequest(BaseModel):
    """Service-level upload request built from the multipart form"""
    file_name: str
    content_type: str
    content: bytes
    compress_image: bool = True
    generate_thumbnail: bool = True
    compress: bool = True
    file_type: str = "documents"


class FileDownload(BaseModel):
    """Payload returned for downloads and thumbnails"""
    file_name: str
    content_type: str
    content: bytes
    size: int
