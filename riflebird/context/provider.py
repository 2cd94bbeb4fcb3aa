"""
Project Context Provider
========================

Discovers a project's tooling (language, lint and format configs, the unit
test framework and the package manager) and caches the result.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from riflebird.cache.manager import ProjectCacheManager
from riflebird.config.constants import (
    DEFAULT_PACKAGE_FILE,
    FORMATTER_CONFIG_CANDIDATES,
    LANGUAGE_CONFIG_CANDIDATES,
    LINTER_CONFIG_CANDIDATES,
    LOCK_FILES,
    UNIT_TEST_CONFIG_CANDIDATES,
)
from riflebird.exceptions.files import ProjectFileError
from riflebird.files.walker import ProjectFileWalker
from riflebird.models.project_context import (
    ConfigFile,
    FrameworkInfo,
    PackageManager,
    ProjectConfigFiles,
    ProjectContext,
    TestFrameworks,
)

logger = logging.getLogger("ProjectContextProvider")


def detect_test_script(scripts: Dict[str, str], frameworks: Sequence[str] = ()) -> Optional[str]:
    """
    Pick the package.json script that runs unit tests.

    Priority: test:unit, test-unit, test, test:<framework> or <framework>,
    then the first script starting with "test:".
    """
    if not scripts:
        return None
    for name in ("test:unit", "test-unit", "test"):
        if scripts.get(name):
            return name
    for framework in frameworks:
        for name in (f"test:{framework}", framework):
            if scripts.get(name):
                return name
    for name in scripts:
        if name.startswith("test:"):
            return name
    return None


def build_test_command(manager_type: str, test_script: Optional[str]) -> str:
    runner = "npm" if manager_type == "unknown" else manager_type
    if test_script:
        return f"{runner} run {test_script}"
    return f"{runner} test"


class ProjectContextProvider:
    """Builds the ProjectContext for one project root, consulting the cache first."""

    def __init__(
        self,
        project_root: Union[str, Path],
        cache_manager: Optional[ProjectCacheManager] = None,
        unit_test_output_strategy: Optional[str] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.file_walker = ProjectFileWalker(self.project_root)
        self.cache_manager = cache_manager or ProjectCacheManager(self.project_root)
        self.unit_test_output_strategy = unit_test_output_strategy

    async def get_context(self, use_cache: bool = True) -> ProjectContext:
        if use_cache:
            cached = await self.cache_manager.load()
            if cached is not None:
                logger.debug("Using cached project context")
                return cached

        context = await self.discover()
        await self.cache_manager.save(context)
        return context

    async def discover(self) -> ProjectContext:
        """Scan the project root. Missing configs are simply left empty."""
        config_files = ProjectConfigFiles(
            language=self._find_config("language", LANGUAGE_CONFIG_CANDIDATES),
            linting=self._find_config("linter", LINTER_CONFIG_CANDIDATES),
            formatting=self._find_config("formatter", FORMATTER_CONFIG_CANDIDATES),
        )
        for framework, candidates in UNIT_TEST_CONFIG_CANDIDATES.items():
            found = self._find_config("unit", candidates, name=framework)
            if found is not None:
                config_files.test_frameworks["unit"] = found
                break

        package_manager = await self._detect_package_manager()

        unit = await self._read_config(config_files.test_frameworks.get("unit"))
        if unit is None and package_manager is not None:
            detected = self._frameworks_from_dependencies(package_manager.dependencies)
            if detected:
                unit = FrameworkInfo(name=detected[0])

        language = await self._read_config(config_files.language) or FrameworkInfo()
        if language.config_file_path and language.name is None:
            language.name = (
                "typescript" if language.config_file_path.startswith("tsconfig") else "javascript"
            )

        return ProjectContext(
            project_root=str(self.project_root),
            config_files=config_files,
            language_config=language,
            linter_config=await self._read_config(config_files.linting) or FrameworkInfo(),
            formatter_config=await self._read_config(config_files.formatting) or FrameworkInfo(),
            package_manager=package_manager,
            test_frameworks=TestFrameworks(unit=unit),
            unit_test_output_strategy=self.unit_test_output_strategy,
        )

    def _find_config(
        self, kind: str, candidates: Sequence[str], name: Optional[str] = None
    ) -> Optional[ConfigFile]:
        for candidate in candidates:
            if (self.project_root / candidate).is_file():
                return ConfigFile(
                    type=kind, name=name, config_file=candidate, config_file_path=candidate
                )
        return None

    async def _read_config(self, config: Optional[ConfigFile]) -> Optional[FrameworkInfo]:
        if config is None:
            return None
        try:
            content = await self.file_walker.read_file_from_project(config.config_file_path)
        except ProjectFileError as e:
            logger.warning("Could not read %s: %s", config.config_file_path, e.message)
            return None
        return FrameworkInfo(
            name=config.name,
            config_file_path=config.config_file_path,
            config_content=content,
        )

    async def _detect_package_manager(self) -> Optional[PackageManager]:
        try:
            content = await self.file_walker.read_file_from_project(DEFAULT_PACKAGE_FILE)
        except ProjectFileError:
            logger.info("No %s found in %s", DEFAULT_PACKAGE_FILE, self.project_root)
            return None

        manager_type, lock_file = self._detect_lock_file()

        try:
            package = json.loads(content)
        except json.JSONDecodeError:
            logger.warning("%s is not valid JSON", DEFAULT_PACKAGE_FILE)
            package = {}
        if not isinstance(package, dict):
            package = {}

        dependencies = self._collect_dependencies(package)
        frameworks = self._frameworks_from_dependencies(dependencies)
        scripts = package.get("scripts") or {}
        test_script = detect_test_script(scripts if isinstance(scripts, dict) else {}, frameworks)

        return PackageManager(
            type=manager_type,
            lock_file_path=lock_file,
            package_file_path=DEFAULT_PACKAGE_FILE,
            package_file_content=content,
            test_command=build_test_command(manager_type, test_script),
            test_script=test_script,
            dependencies=dependencies,
        )

    def _detect_lock_file(self) -> Tuple[str, Optional[str]]:
        for lock_file, manager in LOCK_FILES.items():
            if (self.project_root / lock_file).is_file():
                return manager, lock_file
        return "unknown", None

    @staticmethod
    def _collect_dependencies(package: dict) -> List[str]:
        names: List[str] = []
        for section in ("dependencies", "devDependencies", "peerDependencies"):
            deps = package.get(section) or {}
            if isinstance(deps, dict):
                names.extend(name for name in deps if name not in names)
        return names

    @staticmethod
    def _frameworks_from_dependencies(dependencies: Sequence[str]) -> List[str]:
        return [fw for fw in UNIT_TEST_CONFIG_CANDIDATES if fw in dependencies]
