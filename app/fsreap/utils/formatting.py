"""Rich console formatting utilities.

Provides the shared consoles, message helpers and the human-readable
size formatter used by the statistics report.
"""

import sys
from datetime import datetime

from rich.console import Console
from rich.theme import Theme

# Styles referenced by markup throughout the CLI
REAP_THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "#69B9A1",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "removed": "#f53263",
        "protected": "bold #faf870",
    }
)

_SIZE_UNITS: tuple[str, ...] = ("", "kiB", "MiB", "GiB", "TiB", "PiB", "EiB")

# A value is promoted to the next unit only once it exceeds this many units
_SIZE_PROMOTE_AT = 10 * 1024


def _detect_color_system() -> str | None:
    """Return "truecolor" for interactive terminals, None to let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


console = Console(theme=REAP_THEME, color_system=_detect_color_system())
err_console = Console(theme=REAP_THEME, stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int) -> str:
    """Format a byte count with binary units.

    The count is divided by 1024 while it is strictly greater than ten
    of the next unit, so 10240 stays in bytes and 15360 becomes 15 kiB.
    Plain byte counts carry no unit suffix.

    Args:
        size_bytes: Non-negative number of bytes.

    Returns:
        Human-readable size string, e.g. ``"0"``, ``"15 kiB"``.
    """
    value = size_bytes
    unit = 0
    while value > _SIZE_PROMOTE_AT and unit < len(_SIZE_UNITS) - 1:
        value //= 1024
        unit += 1
    if unit == 0:
        return str(value)
    return f"{value} {_SIZE_UNITS[unit]}"


def format_timestamp(timestamp: int) -> str:
    """Format an epoch timestamp as local ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
