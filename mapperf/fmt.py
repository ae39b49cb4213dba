"""
mapperf.fmt - Terminal formatting for benchmark output
"""

from typing import Optional


class Colors:
    BLUE = "\033[94m"
    GREEN = "\033[92m"
    GRAY = "\033[90m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def colorize(text: str, color: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{color}{text}{Colors.ENDC}"


def format_time(seconds: float) -> str:
    if seconds < 0.000001:
        return f"{seconds * 1_000_000_000:.0f} ns"
    elif seconds < 0.001:
        return f"{seconds * 1_000_000:.2f} µs"
    elif seconds < 1.0:
        return f"{seconds * 1000:.2f} ms"
    else:
        return f"{seconds:.4f} s"


def render_duration(seconds: Optional[float], loading: bool = False) -> str:
    """
    Render one result cell.

    A measured duration wins; otherwise "..." while a run is in progress
    and "-" when nothing has been measured yet.
    """
    if seconds is not None:
        return format_time(seconds)
    elif loading:
        return "..."
    else:
        return "-"
