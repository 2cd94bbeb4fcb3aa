#!/usr/bin/env python3
"""
Agent Exception Definitions for Riflebird

Errors raised by the agentic conversation loop. All of them stop the run.
"""

from typing import Any, Optional

from riflebird.exceptions.base import RiflebirdBaseError


class AgentError(RiflebirdBaseError):
    """Base exception for agentic-run errors."""

    pass


class InvalidResponseFormatError(AgentError):
    """Raised when the model reply cannot be decoded as an action."""

    def __init__(self, message, raw_response=None, original_error=None):
        super().__init__(message, original_error=original_error)
        self.raw_response = raw_response
        self.user_hint = "The model returned a reply that is not valid action JSON."


class UnknownActionError(AgentError):
    """Raised when the action discriminant is not a known tag."""

    def __init__(self, action: Any, raw_response: Optional[str] = None):
        super().__init__(f"AI response contained an unknown action: {action!r}")
        self.action = action
        self.raw_response = raw_response
        self.user_hint = "The model asked for an action Riflebird does not support."


class IterationLimitExceededError(AgentError):
    """Raised when the turn budget runs out before code is produced."""

    def __init__(self, max_iterations: int):
        super().__init__(
            f"Agent failed to generate result after {max_iterations} iterations"
        )
        self.max_iterations = max_iterations
        self.user_hint = (
            "The model kept requesting files without producing code. "
            "Try raising MAX_ITERATIONS."
        )
