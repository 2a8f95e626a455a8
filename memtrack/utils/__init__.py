"""
Utility functions for the memtrack host memory monitor.
"""
from memtrack.utils.logger import get_logger, setup_logger
from memtrack.utils.utils import load_json, format_bytes, bytes_to_gb, bytes_to_mb, KIB, MIB, GIB

__all__ = [
    'get_logger',
    'setup_logger',
    'load_json',
    'format_bytes',
    'bytes_to_gb',
    'bytes_to_mb',
    'KIB',
    'MIB',
    'GIB'
]
