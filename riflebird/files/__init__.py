"""Project file access."""

from .walker import ProjectFileWalker

__all__ = ["ProjectFileWalker"]
