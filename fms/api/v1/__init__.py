"""
API v1 - file storage and processing endpoints.
"""
from fastapi import APIRouter
from fms.api.v1.files import router as files_router
from fms.api.v1.processing import router as processing_router

router = APIRouter()
router.include_router(files_router)
router.include_router(processing_router)
