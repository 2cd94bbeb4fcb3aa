import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from riflebird import __version__
from riflebird.config.constants import DEFAULT_PACKAGE_FILE, RIFLEBIRD_CACHE_FILE, RIFLEBIRD_DIR
from riflebird.exceptions.cache import CacheIOError
from riflebird.exceptions.files import ProjectFileError
from riflebird.files.walker import ProjectFileWalker
from riflebird.models.project_context import ProjectContext

logger = logging.getLogger("ProjectCacheManager")


class _CacheDocument(ProjectContext):
    """On-disk shape: the context plus the version that wrote it."""

    riflebird_version: str


class ProjectCacheManager:
    """
    Persists a ProjectContext under <project_root>/.riflebird/.

    The cache is only an optimization. Loading returns None whenever the
    snapshot cannot be trusted, and saving never raises.

    There is no cross-process locking: concurrent writers are last-writer-wins.
    """

    def __init__(self, project_root: Union[str, Path], version: str = __version__):
        self.project_root = Path(project_root).resolve()
        self.version = version
        self.cache_dir = self.project_root / RIFLEBIRD_DIR
        self.cache_path = self.cache_dir / RIFLEBIRD_CACHE_FILE
        self.file_walker = ProjectFileWalker(self.project_root)

    async def has_cache(self) -> bool:
        return await asyncio.to_thread(self.cache_path.is_file)

    async def load(self) -> Optional[ProjectContext]:
        """
        Load the cached context and reconcile it with the live project.

        Returns None when there is no cache, it is corrupt, it was written by
        another version, or any tracked file is no longer readable. When
        tracked contents drifted, the refreshed context is saved once and
        returned.
        """
        try:
            raw = await asyncio.to_thread(self.cache_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Cache file not found")
            return None
        except (OSError, UnicodeDecodeError) as e:
            self._log_io_error(
                CacheIOError(
                    f"Could not read cache: {e}",
                    cache_path=str(self.cache_path),
                    operation="read",
                    original_error=e,
                )
            )
            return None

        try:
            document = _CacheDocument.model_validate_json(raw)
        except ValidationError:
            logger.debug("Cache file corrupted, invalidating...")
            return None

        if document.riflebird_version != self.version:
            logger.info(
                "Riflebird version changed (%s -> %s), invalidating cache...",
                document.riflebird_version,
                self.version,
            )
            return None

        cached = ProjectContext.model_validate(
            document.model_dump(exclude={"riflebird_version"})
        )
        reconciled, changed = await self._reconcile(cached)
        if reconciled is None:
            return None

        if changed:
            logger.debug("Cache was stale but repairable, updating...")
            await self.save(reconciled)
        return reconciled

    async def save(self, context: ProjectContext) -> None:
        """Write the context. Failures are logged, never raised."""
        try:
            document = _CacheDocument(
                **context.model_dump(), riflebird_version=self.version
            )
            await self.file_walker.write_file_to_project(
                self.cache_path, document.model_dump_json(indent=2)
            )
            logger.debug("Project context cached successfully")
        except (ProjectFileError, OSError, ValueError) as e:
            self._log_io_error(
                CacheIOError(
                    f"Error saving cache: {e}",
                    cache_path=str(self.cache_path),
                    operation="write",
                    original_error=e,
                )
            )

    async def clear(self) -> bool:
        """Delete the cache file. Returns True if one was removed."""

        def _remove() -> bool:
            if not self.cache_path.exists():
                return False
            self.cache_path.unlink()
            if self.cache_dir.is_dir() and not any(self.cache_dir.iterdir()):
                self.cache_dir.rmdir()
            return True

        try:
            return await asyncio.to_thread(_remove)
        except OSError as e:
            self._log_io_error(
                CacheIOError(
                    f"Error clearing cache: {e}",
                    cache_path=str(self.cache_path),
                    operation="delete",
                    original_error=e,
                )
            )
            return False

    async def _reconcile(self, cached: ProjectContext):
        """
        Compare every tracked file with its cached content.

        Returns (context, changed), or (None, False) if a tracked file
        cannot be read.
        """
        context = cached.model_copy(deep=True)
        changed = False

        for entry in context.tracked_configs():
            live = await self._read_tracked(entry.config_file_path)
            if live is None:
                return None, False
            if live != entry.config_content:
                logger.debug("Config file changed, updating cache: %s", entry.config_file_path)
                entry.config_content = live
                changed = True

        package_manager = context.package_manager
        package_file = DEFAULT_PACKAGE_FILE
        if package_manager is not None and package_manager.package_file_path:
            package_file = package_manager.package_file_path

        live = await self._read_tracked(package_file)
        if live is None:
            return None, False
        if package_manager is not None and live != package_manager.package_file_content:
            logger.debug("Package file changed, updating cache: %s", package_file)
            package_manager.package_file_content = live
            changed = True

        return context, changed

    async def _read_tracked(self, file_path: str) -> Optional[str]:
        try:
            return await self.file_walker.read_file_from_project(file_path)
        except ProjectFileError:
            logger.debug("Cache invalid: tracked file missing or unreadable %s", file_path)
            return None

    @staticmethod
    def _log_io_error(error: CacheIOError) -> None:
        logger.error("%s (operation=%s)", error.message, error.operation)
