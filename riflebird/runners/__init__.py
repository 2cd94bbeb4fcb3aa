"""Subprocess-backed runners: the process executor, tests and type checks."""

from .process import (
    ProcessExecutionResult,
    ProcessOptions,
    StdioMode,
    execute_process_command,
)

__all__ = [
    "ProcessExecutionResult",
    "ProcessOptions",
    "StdioMode",
    "execute_process_command",
]
