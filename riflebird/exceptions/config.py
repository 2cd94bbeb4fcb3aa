#!/usr/bin/env python3
"""
Configuration Exception Definitions for Riflebird
"""

from riflebird.exceptions.base import RiflebirdBaseError


class ConfigError(RiflebirdBaseError):
    """Raised when settings are missing or invalid."""

    def __init__(self, message, field_name=None, invalid_value=None):
        super().__init__(message)
        self.field_name = field_name
        self.invalid_value = invalid_value
        self.user_hint = f"Configuration problem: {message}"
