"""
Utility functions for the memtrack host memory monitor.
"""
import json
import os
from typing import Any

from memtrack.utils.logger import get_logger

logger = get_logger(__name__)

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB


def load_json(file_path: str) -> Any:
    """
    Load data from a JSON file.

    :param file_path: Path to the JSON file
    :type file_path: str
    :return: Parsed JSON content
    :rtype: Any
    :raises FileNotFoundError: If the file does not exist
    :raises ValueError: If the file cannot be read or is not valid JSON
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.debug(f"Successfully loaded JSON data from: {file_path}")
        return data
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_path}: {e}") from e


def bytes_to_gb(value: int) -> float:
    """Convert a byte count to binary gigabytes."""
    return value / GIB


def bytes_to_mb(value: int) -> float:
    """Convert a byte count to binary megabytes."""
    return value / MIB


def format_bytes(value: int) -> str:
    """
    Format a byte count as a human readable string.

    :param value: Number of bytes
    :type value: int
    :return: Formatted value, e.g. ``'1.50 GB'``
    :rtype: str
    """
    size = float(value)
    for unit in ('B', 'KB', 'MB', 'GB'):
        if abs(size) < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} TB"
