#!/usr/bin/env python3
"""
Project File Exception Definitions for Riflebird
"""

from riflebird.exceptions.base import RiflebirdBaseError


class ProjectFileError(RiflebirdBaseError):
    """Raised when a project file cannot be read or written."""

    def __init__(self, message, file_path=None, operation=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.file_path = file_path
        self.operation = operation


class PathSecurityError(ProjectFileError):
    """Raised when a path resolves outside the project root."""

    def __init__(self, message, file_path=None):
        super().__init__(message, file_path=file_path, operation="resolve")
        self.user_hint = "Access outside the project root is not allowed."
