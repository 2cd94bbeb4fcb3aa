from .project_context import (
    ConfigFile,
    FrameworkInfo,
    PackageManager,
    ProjectConfigFiles,
    ProjectContext,
    TestFrameworks,
)

__all__ = [
    "ConfigFile",
    "FrameworkInfo",
    "PackageManager",
    "ProjectConfigFiles",
    "ProjectContext",
    "TestFrameworks",
]
