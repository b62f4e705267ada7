"""Utility modules for fsreap.

This module exports commonly used utility functions.
"""

from fsreap.utils.formatting import (
    console,
    err_console,
    format_size,
    format_timestamp,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from fsreap.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_size",
    "format_timestamp",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
