"""
File storage endpoints.

Upload (with processing), download, metadata CRUD and thumbnails.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from fms.api.v1.deps import get_file_service
from fms.models.files import FileInfo, FileUpdateRequest, FileUploadRequest
from fms.services.files import FileStorageService
from fms.utils.file_handling import DEFAULT_FILE_TYPE

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/upload", response_model=FileInfo)
async def upload_file(
    file: UploadFile = File(...),
    compress_image: bool = Form(True),
    generate_thumbnail: bool = Form(True),
    compress: bool = Form(True),
    file_type: str = Form(DEFAULT_FILE_TYPE),
    service: FileStorageService = Depends(get_file_service),
):
    """
    Upload a file, processing it before it is stored.

    - **file**: The file to store
    - **compress_image**: Re-encode supported images when it saves space
    - **generate_thumbnail**: Store a thumbnail for supported images
    - **compress**: Compress non-image content when it saves space
    - **file_type**: Logical category used as the storage folder

    Returns:
        Metadata of the stored file
    """
    content = await file.read()
    logger.info(f"Upload request for {file.filename} ({len(content)} bytes, {file.content_type})")

    request = FileUploadRequest(
        file_name=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        content=content,
        compress_image=compress_image,
        generate_thumbnail=generate_thumbnail,
        compress=compress,
        file_type=file_type,
    )

    # Processing is CPU-bound; keep it off the event loop
    return await run_in_threadpool(service.upload_file, request)


@router.get("/list", response_model=List[FileInfo])
async def list_files(service: FileStorageService = Depends(get_file_service)):
    """List metadata for every stored file."""
    return await run_in_threadpool(service.list_files)


@router.get("/provider")
async def get_provider_name(service: FileStorageService = Depends(get_file_service)):
    """Name of the active storage provider."""
    return service.provider_name


@router.get("/{file_id}/download")
async def download_file(file_id: str, service: FileStorageService = Depends(get_file_service)):
    """
    Download a stored file.

    Payloads compressed at upload time are decompressed before being returned.
    """
    download = await run_in_threadpool(service.download_file, file_id)
    if download is None:
        raise HTTPException(status_code=404, detail="File not found")

    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={"Content-Disposition": f'attachment; filename="{download.file_name}"'},
    )


@router.get("/{file_id}/info", response_model=FileInfo)
async def get_file_info(file_id: str, service: FileStorageService = Depends(get_file_service)):
    """Metadata for one file."""
    info = await run_in_threadpool(service.get_file_info, file_id)
    if info is None:
        raise HTTPException(status_code=404, detail="File not found")
    return info


@router.put("/{file_id}", response_model=FileInfo)
async def update_file_info(
    file_id: str,
    update: FileUpdateRequest,
    service: FileStorageService = Depends(get_file_service),
):
    """Rename a file (display name only; the stored object is unchanged)."""
    info = await run_in_threadpool(service.update_file_info, file_id, update.original_file_name)
    if info is None:
        raise HTTPException(status_code=404, detail="File not found")
    return info


@router.delete("/{file_id}", status_code=204)
async def delete_file(file_id: str, service: FileStorageService = Depends(get_file_service)):
    """Delete a file, its thumbnail and its metadata."""
    deleted = await run_in_threadpool(service.delete_file, file_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="File not found")
    return Response(status_code=204)


@router.get("/{file_id}/thumbnail")
async def get_thumbnail(file_id: str, service: FileStorageService = Depends(get_file_service)):
    """Thumbnail of an image file."""
    thumbnail = await run_in_threadpool(service.get_thumbnail, file_id)
    if thumbnail is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")
    return Response(content=thumbnail.content, media_type=thumbnail.content_type)


@router.get("/{file_id}/exists")
async def file_exists(file_id: str, service: FileStorageService = Depends(get_file_service)):
    """Whether a file with this ID is stored with the active provider."""
    return await run_in_threadpool(service.file_exists, file_id)
