"""
Processing endpoints: compression recommendations and dry-run analysis.
"""
import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from fms.api.v1.deps import get_file_service
from fms.core.advisor import CompressionAdvisor
from fms.core.types import IMAGE_OPTIMIZATION
from fms.models.files import FileUploadRequest
from fms.models.processing import AnalysisResponse, ImageMetadataResponse, RecommendationResponse
from fms.services.files import FileStorageService
from fms.utils.metrics import (
    PerformanceTimer,
    calculate_image_metrics,
    get_cpu_mem,
    measure_compression_performance
)

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/processing", tags=["Processing"])


@router.get("/recommendation", response_model=RecommendationResponse)
async def get_recommendation(
    content_type: str = Query(..., description="Declared MIME type"),
    file_size: int = Query(..., ge=0, description="File size in bytes"),
    service: FileStorageService = Depends(get_file_service),
):
    """
    Recommend whether and how a file should be compressed, without reading it.
    """
    compression = service.settings.compression
    advisor = CompressionAdvisor(
        min_savings_threshold=compression.min_savings_threshold,
        max_file_size=compression.max_file_size_bytes,
    )
    recommendation = advisor.recommend(content_type, file_size)

    return RecommendationResponse(
        content_type=content_type,
        file_size=file_size,
        recommended=recommendation.recommended,
        reason=recommendation.reason,
        expected_savings=recommendation.expected_savings,
        method=recommendation.method.value,
    )


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_file(
    file: UploadFile = File(...),
    compress_image: bool = Form(True),
    generate_thumbnail: bool = Form(True),
    compress: bool = Form(True),
    service: FileStorageService = Depends(get_file_service),
):
    """
    Run the processing pipeline over a file without storing it.

    - **file**: The file to analyze
    - **compress_image** / **generate_thumbnail** / **compress**: Same toggles as upload

    Returns:
        Sizes, method, timing and resource usage; PSNR/SSIM when an image was re-encoded
    """
    content = await file.read()
    request = FileUploadRequest(
        file_name=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        content=content,
        compress_image=compress_image,
        generate_thumbnail=generate_thumbnail,
        compress=compress,
    )

    with PerformanceTimer() as timer:
        outcome = await run_in_threadpool(service.process, request)

    psnr = ssim = None
    if outcome.method == IMAGE_OPTIMIZATION:
        psnr, ssim = await run_in_threadpool(calculate_image_metrics, content, outcome.processed_data)

    performance = measure_compression_performance(
        len(content), len(outcome.processed_data), timer.execution_time
    )
    cpu_mem = get_cpu_mem()

    image_metadata = None
    if outcome.image_metadata is not None:
        meta = outcome.image_metadata
        image_metadata = ImageMetadataResponse(
            width=meta.width,
            height=meta.height,
            size_in_bytes=meta.size_in_bytes,
            has_alpha=meta.has_alpha,
            aspect_ratio=round(meta.aspect_ratio, 4),
            pixel_count=meta.pixel_count,
        )

    summary = outcome.summary()
    logger.info(f"Analyzed {request.file_name}: method={outcome.method}, saved={outcome.total_saved_bytes} bytes")

    return AnalysisResponse(
        file_name=request.file_name,
        content_type=request.content_type,
        was_processed=outcome.was_processed,
        method=outcome.method,
        original_size=len(content),
        processed_size=summary["processed_size"],
        thumbnail_size=summary["thumbnail_size"],
        total_saved_bytes=outcome.total_saved_bytes,
        compression_ratio=performance["compression_ratio"],
        space_savings_percent=performance["space_savings_percent"],
        compression_speed_mbps=performance["compression_speed_mbps"],
        processing_time=round(timer.execution_time, 4),
        reason=outcome.reason,
        image_metadata=image_metadata,
        metadata=dict(outcome.metadata),
        cpu_usage=cpu_mem["cpu_usage"],
        memory_usage=cpu_mem["memory_usage"],
        psnr=psnr,
        ssim=ssim,
    )
