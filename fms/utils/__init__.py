"""
Utility functions for the file management service.
"""
from fms.utils.metrics import (
    get_cpu_mem,
    calculate_image_metrics,
    measure_compression_performance,
    PerformanceTimer
)

from fms.utils.file_handling import (
    new_file_id,
    generate_file_name,
    sanitize_segment,
    build_storage_key,
    thumbnail_key
)

__all__ = [
    # Metrics utilities
    'get_cpu_mem',
    'calculate_image_metrics',
    'measure_compression_performance',
    'PerformanceTimer',

    # File naming utilities
    'new_file_id',
    'generate_file_name',
    'sanitize_segment',
    'build_storage_key',
    'thumbnail_key'
]
