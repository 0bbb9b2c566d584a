"""
Utilities for measuring processing performance and image quality.
"""
import time
import logging
from io import BytesIO
from typing import Dict, Optional, Tuple

import numpy as np
import psutil
from PIL import Image, UnidentifiedImageError
from skimage.metrics import peak_signal_noise_ratio, structural_similarity

# Set up logging
logger = logging.getLogger(__name__)


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def _to_array(data: bytes) -> Optional[np.ndarray]:
    try:
        with Image.open(BytesIO(data)) as im:
            return np.array(im.convert("RGB"))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"Failed to convert image to array: {e}")
        return None


def calculate_image_metrics(original: bytes, processed: bytes) -> Tuple[Optional[float], Optional[float]]:
    """
    Calculate PSNR and SSIM between an original image and its re-encoding.

    Args:
        original: Original encoded image bytes
        processed: Re-encoded image bytes (same dimensions)

    Returns:
        Tuple of (PSNR, SSIM) rounded to 2 and 4 decimal places, or
        (None, None) if either image can't be decoded or sizes differ
    """
    original_img = _to_array(original)
    processed_img = _to_array(processed)
    if original_img is None or processed_img is None:
        return None, None

    if original_img.shape != processed_img.shape:
        logger.info(f"Image shapes don't match: original {original_img.shape} vs processed {processed_img.shape}")
        return None, None

    mse = np.mean(np.square(original_img.astype(np.float32) - processed_img.astype(np.float32)))
    if mse == 0:
        # Identical images; PSNR is unbounded, report a conventional ceiling
        psnr = 100.0
    else:
        psnr = peak_signal_noise_ratio(original_img, processed_img, data_range=255)

    # SSIM needs a window of at least 7 pixels per side
    if min(original_img.shape[:2]) < 7:
        return round(float(psnr), 2), None

    ssim = structural_similarity(original_img, processed_img, data_range=255, channel_axis=2)
    return round(float(psnr), 2), round(float(ssim), 4)


def measure_compression_performance(
    original_size: int,
    compressed_size: int,
    compression_time: float
) -> Dict[str, float]:
    """
    Calculate compression performance metrics.

    Args:
        original_size: Size of the original file in bytes
        compressed_size: Size of the stored file in bytes
        compression_time: Time taken for processing in seconds

    Returns:
        Dictionary with compression ratio, space savings percentage, and speed
    """
    compression_ratio = original_size / compressed_size if compressed_size > 0 else 0
    space_savings = (1 - (compressed_size / original_size)) * 100 if original_size > 0 else 0
    compression_speed = original_size / (compression_time * 1024 * 1024) if compression_time > 0 else 0  # MB/s

    return {
        "compression_ratio": round(compression_ratio, 2),
        "space_savings_percent": round(space_savings, 2),
        "compression_speed_mbps": round(compression_speed, 2)
    }


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.perf_counter() - self.start_time
        return False  # Don't suppress exceptions
