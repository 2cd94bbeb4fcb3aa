#!/usr/bin/env python3
"""
Riflebird Exceptions Package

Unified exception hierarchy for Riflebird.
"""

# Base exceptions
from .base import RiflebirdBaseError

# Agent exceptions
from .agent import (
    AgentError,
    InvalidResponseFormatError,
    IterationLimitExceededError,
    UnknownActionError,
)

# Process exceptions
from .process import ProcessSpawnError

# File exceptions
from .files import PathSecurityError, ProjectFileError

# Cache exceptions
from .cache import CacheIOError

# Writer exceptions
from .writer import TestGenerationError

# Config exceptions
from .config import ConfigError

# Provider exceptions
from .provider import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
    is_fatal_provider_error,
)


__all__ = [
    # Base
    "RiflebirdBaseError",
    # Agent
    "AgentError",
    "InvalidResponseFormatError",
    "IterationLimitExceededError",
    "UnknownActionError",
    # Process
    "ProcessSpawnError",
    # Files
    "ProjectFileError",
    "PathSecurityError",
    # Cache
    "CacheIOError",
    # Writer
    "TestGenerationError",
    # Config
    "ConfigError",
    # Provider
    "ProviderError",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
    "ProviderConnectionError",
    "ProviderResponseError",
    "is_fatal_provider_error",
]
