"""
Console user interface for the memtrack host memory monitor.
Renders snapshots as a refreshing terminal view and prints CLI status messages.
"""
import os
import sys
import threading
from typing import Optional, List

from memtrack.monitoring import ResourceSampler, Snapshot
from memtrack.utils import bytes_to_gb, bytes_to_mb, KIB

COLORS = {
    'RESET': '\033[0m',
    'RED': '\033[91m',
    'GREEN': '\033[92m',
    'YELLOW': '\033[93m',
    'BLUE': '\033[94m',
    'MAGENTA': '\033[95m',
    'CYAN': '\033[96m',
    'WHITE': '\033[97m',
    'BOLD': '\033[1m'
}

BAR_WIDTH = 50
CLEAR_SCREEN = '\033[2J\033[H'


def _supports_color() -> bool:
    """
    Determine if standard output is a terminal that understands ANSI colors.

    :return: True if color is supported, False otherwise
    :rtype: bool
    """
    if os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(sys.stdout, 'isatty', None)
    return bool(isatty and isatty())


def colored_text(text: str, color: str, enabled: Optional[bool] = None) -> str:
    """
    Wraps text with ANSI color codes if supported.

    :param text: Text to colorize
    :type text: str
    :param color: Color name from COLORS dict
    :type color: str
    :param enabled: Force colors on or off, autodetected when None
    :type enabled: Optional[bool]
    :return: Colorized text if supported, original text otherwise
    :rtype: str
    """
    if enabled is None:
        enabled = _supports_color()
    if not enabled or color not in COLORS:
        return text

    return COLORS[color] + text + COLORS['RESET']


def display_error(message: str, error_type: str = "ERROR") -> None:
    """
    Displays an error message to the console with proper formatting.

    :param message: The error message to display
    :type message: str
    :param error_type: Type of error for the prefix
    :type error_type: str
    """
    error_prefix = colored_text(f"[{error_type}]", "RED")
    print(f"{error_prefix} {message}", file=sys.stderr)


def display_info(message: str, info_type: str = "INFO") -> None:
    """
    Displays an informational message to the console with proper formatting.

    :param message: The message to display
    :type message: str
    :param info_type: Type of info for the prefix
    :type info_type: str
    """
    info_prefix = colored_text(f"[{info_type}]", "BLUE")
    print(f"{info_prefix} {message}")


def display_success(message: str) -> None:
    success_prefix = colored_text("[SUCCESS]", "GREEN")
    print(f"{success_prefix} {message}")


def render_usage_bar(usage_percent: float, width: int = BAR_WIDTH, color: bool = False) -> str:
    """
    Draws a fixed-width usage bar, ``#`` for used cells and ``-`` for free ones.

    :param usage_percent: Memory usage in percent
    :type usage_percent: float
    :param width: Number of cells
    :type width: int
    :param color: Emit ANSI colors
    :type color: bool
    :return: Bar including the trailing percentage
    :rtype: str
    """
    filled = int(usage_percent / 100.0 * width)
    filled = min(max(filled, 0), width)
    used = colored_text('#' * filled, 'RED', color) if filled else ''
    free = colored_text('-' * (width - filled), 'GREEN', color) if filled < width else ''
    return f"[{used}{free}] {usage_percent:.1f}%"


def render_snapshot(snapshot: Snapshot, color: Optional[bool] = None) -> str:
    """
    Formats a snapshot as the tracker's terminal view.

    :param snapshot: Snapshot to render
    :type snapshot: Snapshot
    :param color: Force colors on or off, autodetected when None
    :type color: Optional[bool]
    :return: Multi-line text ready to print
    :rtype: str
    """
    if color is None:
        color = _supports_color()

    def section(title: str, tone: str) -> List[str]:
        return [colored_text(title, tone, color), colored_text('-' * len(title), tone, color)]

    lines = [
        colored_text("==================================", 'CYAN', color),
        colored_text("   Memory Allocation Tracker", 'CYAN', color),
        colored_text("==================================", 'CYAN', color),
        "",
    ]
    lines += section("Memory Statistics:", 'YELLOW')
    lines += [
        f"Total Memory:    {bytes_to_gb(snapshot.total_physical_bytes):.2f} GB",
        f"Used Memory:     {bytes_to_gb(snapshot.used_physical_bytes):.2f} GB",
        f"Available:       {bytes_to_gb(snapshot.available_physical_bytes):.2f} GB",
        f"Page Size:       {snapshot.page_size_bytes / KIB:.2f} KB",
        f"Pages In Use:    {snapshot.page_count}",
        f"Memory Usage:    {snapshot.usage_percent:.1f}%",
        "",
    ]
    lines += section("Memory Usage Bar:", 'GREEN')
    lines += [render_usage_bar(snapshot.usage_percent, color=color), ""]
    lines += section("Top Memory Processes:", 'MAGENTA')
    if snapshot.processes:
        lines += [f"{process.name:<30}: {bytes_to_mb(process.working_set_bytes):.1f} MB"
                  for process in snapshot.processes]
    else:
        lines.append("(no processes above threshold)")
    return "\n".join(lines)


def run_console_monitor(sampler: ResourceSampler,
                        interval: float = 1.0,
                        iterations: Optional[int] = None,
                        stop_event: Optional[threading.Event] = None,
                        stream=None) -> int:
    """
    Clears the terminal and redraws a fresh snapshot every interval.

    :param sampler: Source of snapshots
    :type sampler: ResourceSampler
    :param interval: Seconds between redraws
    :type interval: float
    :param iterations: Stop after this many redraws, run until interrupted when None
    :type iterations: Optional[int]
    :param stop_event: Optional event that ends the loop when set
    :type stop_event: Optional[threading.Event]
    :param stream: Output stream, defaults to sys.stdout
    :return: Number of frames drawn
    :rtype: int
    """
    stream = stream or sys.stdout
    stop_event = stop_event or threading.Event()
    color = _supports_color() and stream is sys.stdout
    frames = 0
    try:
        while iterations is None or frames < iterations:
            snapshot = sampler.sample()
            if color:
                stream.write(CLEAR_SCREEN)
            stream.write(render_snapshot(snapshot, color=color) + "\n")
            stream.write("\n" + colored_text("Press Ctrl+C to exit", 'CYAN', color) + "\n")
            stream.flush()
            frames += 1
            if iterations is not None and frames >= iterations:
                break
            if stop_event.wait(interval):
                break
    except KeyboardInterrupt:
        stream.write("\n")
    return frames
