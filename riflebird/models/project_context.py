"""
Project Context Models
======================

Snapshot of a project's tooling configuration. Config contents are stored
verbatim so a later run can tell whether the project changed.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PackageManagerType = Literal["npm", "yarn", "pnpm", "bun", "unknown"]


class ConfigFile(BaseModel):
    """A discovered config file, before its content is read."""

    type: str
    name: Optional[str] = None
    config_file: str
    config_file_path: str


class ProjectConfigFiles(BaseModel):
    language: Optional[ConfigFile] = None
    linting: Optional[ConfigFile] = None
    formatting: Optional[ConfigFile] = None
    test_frameworks: Dict[str, ConfigFile] = Field(default_factory=dict)


class FrameworkInfo(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    config_file_path: Optional[str] = None
    config_content: Optional[str] = None


class TestFrameworks(BaseModel):
    __test__ = False  # not a pytest test class

    unit: Optional[FrameworkInfo] = None
    e2e: Optional[FrameworkInfo] = None


class PackageManager(BaseModel):
    type: PackageManagerType = "unknown"
    lock_file_path: Optional[str] = None
    package_file_path: Optional[str] = None
    package_file_content: Optional[str] = None
    test_command: Optional[str] = None
    test_script: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)


class ProjectContext(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_root: str
    config_files: ProjectConfigFiles = Field(default_factory=ProjectConfigFiles)
    language_config: FrameworkInfo = Field(default_factory=FrameworkInfo)
    linter_config: FrameworkInfo = Field(default_factory=FrameworkInfo)
    formatter_config: FrameworkInfo = Field(default_factory=FrameworkInfo)
    package_manager: Optional[PackageManager] = None
    test_frameworks: TestFrameworks = Field(default_factory=TestFrameworks)
    unit_test_output_strategy: Optional[Literal["root", "colocated"]] = None

    def tracked_configs(self) -> List[FrameworkInfo]:
        """Config entries whose files are re-checked on cache load."""
        entries = [
            self.language_config,
            self.linter_config,
            self.formatter_config,
            self.test_frameworks.unit,
            self.test_frameworks.e2e,
        ]
        return [e for e in entries if e is not None and e.config_file_path]

    @property
    def unit_framework_name(self) -> Optional[str]:
        unit = self.test_frameworks.unit
        return unit.name if unit else None

    @property
    def uses_react(self) -> bool:
        deps = self.package_manager.dependencies if self.package_manager else []
        return "react" in deps
