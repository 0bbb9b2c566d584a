"""
Request dependencies shared by the v1 routers.
"""
from fastapi import Request

from fms.services.files import FileStorageService


def get_file_service(request: Request) -> FileStorageService:
    """File service attached to the running application."""
    return request.app.state.file_service
