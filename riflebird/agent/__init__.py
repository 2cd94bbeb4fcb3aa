"""Agentic conversation engine."""

from .resolver import FileResolver, candidate_paths
from .runner import AgenticRunner
from .structs import (
    Conversation,
    GenerateTest,
    Message,
    NotFound,
    RequestFiles,
    Resolved,
)

__all__ = [
    "AgenticRunner",
    "FileResolver",
    "candidate_paths",
    "Conversation",
    "GenerateTest",
    "Message",
    "NotFound",
    "RequestFiles",
    "Resolved",
]
