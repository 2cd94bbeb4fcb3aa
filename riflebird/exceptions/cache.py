#!/usr/bin/env python3
"""
Cache Exception Definitions for Riflebird

The project cache is an optimization. These errors are logged, never raised
past the cache manager.
"""

from riflebird.exceptions.base import RiflebirdBaseError


class CacheIOError(RiflebirdBaseError):
    """Raised internally when the cache file cannot be read or written."""

    def __init__(self, message, cache_path=None, operation=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.cache_path = cache_path
        self.operation = operation
