"""
API module for the file management service.
"""
import logging
import platform
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from fms import __version__
from fms.api.v1 import router as v1_router
from fms.config import Settings, get_settings
from fms.exceptions import FmsError
from fms.repository import create_repository
from fms.services.files import FileStorageService
from fms.storage import create_storage

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[FileStorageService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings (read from the environment if omitted)
        service: Pre-built file service, mainly for tests

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    if service is None:
        service = FileStorageService(
            settings=settings,
            storage=create_storage(settings),
            repository=create_repository(settings),
        )

    app = FastAPI(
        title="File Management Service",
        description="""
        Store files on local disk or in an object store, processing them on upload:
        - Image optimization and thumbnail generation
        - Zstandard compression for compressible content
        - PDF container optimization

        Also provides compression recommendations and dry-run analysis.
        """,
        version=__version__
    )
    app.state.settings = settings
    app.state.file_service = service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/api")

    @app.exception_handler(FmsError)
    async def fms_exception_handler(request: Request, exc: FmsError):
        """Storage and configuration failures."""
        logger.error(f"{exc.__class__.__name__}: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"detail": exc.message, "error": exc.details}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unexpected errors."""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred", "error": str(exc)}
        )

    # Health check endpoints
    @app.get("/health")
    async def health_check():
        """Check if the API is running."""
        return {"status": "healthy", "version": __version__}

    @app.get("/health/detailed")
    async def detailed_health_check():
        """
        Provides detailed health information including system metrics and component status.
        """
        import psutil
        import zstandard as zstd
        import PIL
        import pypdf

        # System info
        system_info = {
            "cpu_usage": psutil.cpu_percent(interval=0.1),
            "memory_usage": psutil.virtual_memory().percent,
            "disk_usage": psutil.disk_usage('/').percent,
            "python_version": platform.python_version(),
            "platform": platform.platform()
        }

        # Check processing libraries
        processing_status = {}

        try:
            test_data = b"test data for compression" * 8
            compressed = zstd.ZstdCompressor(level=3).compress(test_data)
            decompressed = zstd.ZstdDecompressor().decompress(compressed)
            processing_status["zstd"] = {
                "status": "ok" if decompressed == test_data else "error",
                "compression_ratio": round(len(test_data) / len(compressed), 2)
            }
        except zstd.ZstdError as e:
            processing_status["zstd"] = {"status": "error", "message": str(e)}

        processing_status["pillow"] = {"status": "ok", "version": PIL.__version__}
        processing_status["pypdf"] = {"status": "ok", "version": pypdf.__version__}

        storage_service: FileStorageService = app.state.file_service
        return {
            "status": "healthy",
            "version": __version__,
            "system": system_info,
            "processing": processing_status,
            "storage": {"provider": storage_service.provider_name},
            "timestamp": time.time()
        }

    return app


__all__ = ['create_app']
