#!/usr/bin/env python3
"""
Provider Exception Classes
==========================

Errors raised by the AI provider adapters. Rate-limit and authentication
errors are treated as fatal by batch callers.
"""

from typing import Optional

from .base import RiflebirdBaseError


class ProviderError(RiflebirdBaseError):
    """
    Base exception for all provider-related errors.
    """

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        model_name: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)

        if "provider_name" not in self.details and provider_name:
            self.details["provider_name"] = provider_name
        if "model_name" not in self.details and model_name:
            self.details["model_name"] = model_name


class ProviderAuthenticationError(ProviderError):
    """
    Raised when provider authentication fails (401/403).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        if status_code is not None:
            self.details["status_code"] = status_code
        self.user_hint = (
            "Authentication with the provider failed. "
            "Please check your API keys and authentication settings."
        )


class ProviderRateLimitError(ProviderError):
    """
    Raised when provider rate limits or usage quotas are exceeded.
    """

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)

        if retry_after is not None:
            self.details["retry_after_seconds"] = retry_after

        if retry_after:
            self.user_hint = (
                f"Rate limit exceeded. Please wait {retry_after} seconds before trying again."
            )
        else:
            self.user_hint = (
                "Rate limit exceeded. Please wait before making additional requests."
            )


class ProviderConnectionError(ProviderError):
    """
    Raised for network failures and request timeouts.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = (
            "Failed to connect to the provider. "
            "Please check your internet connection and provider status."
        )


class ProviderResponseError(ProviderError):
    """
    Raised when the provider returns no usable choice or message.
    """

    def __init__(self, message: str, response_data: Optional[dict] = None, **kwargs):
        super().__init__(message, **kwargs)

        if response_data:
            self.details["response_data"] = response_data

        self.user_hint = (
            "The provider returned an invalid response. "
            "This may be a temporary issue or provider API change."
        )


def is_fatal_provider_error(error: BaseException) -> bool:
    """Errors that should stop a whole batch rather than a single file."""
    return isinstance(error, (ProviderRateLimitError, ProviderAuthenticationError))
