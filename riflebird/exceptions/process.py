#!/usr/bin/env python3
"""
Process Exception Definitions for Riflebird

A non-zero exit code is not an error; only failing to start the process is.
"""

from typing import Optional, Sequence

from riflebird.exceptions.base import RiflebirdBaseError


class ProcessSpawnError(RiflebirdBaseError):
    """Raised when a subprocess cannot be started at all."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        args: Optional[Sequence[str]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error=original_error)
        self.command = command
        self.args_list = list(args or [])
        self.user_hint = (
            f"Could not start '{command}'. Check that it is installed and on PATH."
        )
