#!/usr/bin/env python3
"""
Test Writer Exception Definitions for Riflebird
"""

from riflebird.exceptions.base import RiflebirdBaseError


class TestGenerationError(RiflebirdBaseError):
    """Raised when a source file could not get a working test within the retry budget."""

    __test__ = False

    def __init__(self, message, source_path=None, attempts=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.source_path = source_path
        self.attempts = attempts
        self.user_hint = (
            f"Could not produce a passing test for {source_path}. "
            "Inspect the generated file or raise HEALING_MAX_RETRIES."
        )
