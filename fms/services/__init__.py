"""Application services built on top of the processing core."""
from fms.services.files import FileStorageService

__all__ = ['FileStorageService']
