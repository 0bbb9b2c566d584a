"""
File Management Service

This package implements a FastAPI service that stores uploaded files on local
disk or in an object store, processing them on the way in:
- Image optimization (quality-aware re-encoding) and thumbnails
- Zstandard compression for compressible content
- PDF container optimization (metadata stripping, stream packing)

Features include:
- Pluggable storage providers (local, S3, MinIO, Azure Blob, Google Cloud Storage)
- In-memory or SQLite metadata records
- Compression recommendations and dry-run analysis with quality metrics
"""
__version__ = "1.0.0"

__all__ = ['__version__']
