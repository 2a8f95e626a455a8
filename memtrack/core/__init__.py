"""
Core definitions for the memtrack host memory monitor.
"""
from memtrack.core.connection_state import ConnectionState

__all__ = [
    'ConnectionState'
]
