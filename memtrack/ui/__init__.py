"""
User interface utilities for the memtrack host memory monitor.
"""
from memtrack.ui.ui_console import (
    display_error,
    display_info,
    display_success,
    render_snapshot,
    render_usage_bar,
    run_console_monitor
)

__all__ = [
    'display_error',
    'display_info',
    'display_success',
    'render_snapshot',
    'render_usage_bar',
    'run_console_monitor'
]
