import asyncio
import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from riflebird.config.constants import COMMON_EXCLUDE_DIRS, DEFAULT_FILE_EXCLUDE_PATTERNS
from riflebird.exceptions.files import PathSecurityError, ProjectFileError
from riflebird.security.secret_scanner import SecretScanner

logger = logging.getLogger("ProjectFileWalker")


class ProjectFileWalker:
    """
    Root-confined file access for one project.

    Every path is resolved against the project root and rejected if it
    lands outside it. Disk I/O runs in a worker thread so callers on the
    event loop never block. Reads are passed through SecretScanner unless
    the caller asks for the raw bytes.
    """

    def __init__(self, project_root: Union[str, Path]):
        self.project_root = Path(project_root).resolve()

    def resolve_and_validate_path(self, file_path: Union[str, Path]) -> Path:
        """
        Resolve `file_path` against the project root.

        Raises:
            PathSecurityError: the resolved path is outside the project root.
        """
        full_path = (self.project_root / file_path).resolve()
        if not self._is_within_root(full_path):
            raise PathSecurityError(
                f"Access denied for path outside project root: {file_path}",
                file_path=str(file_path),
            )
        return full_path

    async def read_file_from_project(
        self, file_path: Union[str, Path], sanitize: bool = True
    ) -> str:
        """
        Read a UTF-8 text file inside the project, with secrets redacted.

        Raises:
            PathSecurityError: path escapes the project root.
            ProjectFileError: the file is missing, unreadable or not UTF-8.
        """
        full_path = self.resolve_and_validate_path(file_path)
        try:
            content = await asyncio.to_thread(full_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProjectFileError(
                f"Failed to read file {file_path}: {e}",
                file_path=str(file_path),
                operation="read",
                original_error=e,
            ) from e
        if not sanitize:
            return content
        return SecretScanner.sanitize(content, Path(file_path).as_posix()).sanitized_code

    async def write_file_to_project(self, file_path: Union[str, Path], content: str) -> Path:
        """Write `content` to a project file, creating parent directories."""
        full_path = self.resolve_and_validate_path(file_path)
        try:
            await asyncio.to_thread(self._write_text, full_path, content)
        except OSError as e:
            raise ProjectFileError(
                f"Failed to write file {file_path}: {e}",
                file_path=str(file_path),
                operation="write",
                original_error=e,
            ) from e
        logger.debug("Wrote %s (%d chars)", full_path, len(content))
        return full_path

    async def find_files(
        self,
        patterns: Sequence[str],
        exclude_patterns: Iterable[str] = DEFAULT_FILE_EXCLUDE_PATTERNS,
    ) -> List[str]:
        """Project-relative paths matching any glob in `patterns`, sorted."""
        return await asyncio.to_thread(
            self._find_files_sync, list(patterns), tuple(exclude_patterns)
        )

    def _find_files_sync(self, patterns: List[str], exclude_patterns: tuple) -> List[str]:
        matches = set()
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            # Prune in place so os.walk never descends into excluded dirs
            dirnames[:] = [d for d in dirnames if d not in COMMON_EXCLUDE_DIRS]
            for name in filenames:
                if any(fnmatch.fnmatch(name, ex) for ex in exclude_patterns):
                    continue
                rel = (Path(dirpath) / name).relative_to(self.project_root).as_posix()
                if any(_matches(rel, pattern) for pattern in patterns):
                    matches.add(rel)
        return sorted(matches)

    @staticmethod
    def _write_text(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def _is_within_root(self, path: Path) -> bool:
        try:
            path.relative_to(self.project_root)
            return True
        except ValueError:
            return False


def _matches(rel_path: str, pattern: str) -> bool:
    pattern = pattern[2:] if pattern.startswith("./") else pattern
    if fnmatch.fnmatch(rel_path, pattern):
        return True
    # "src/**/*.ts" should also match files directly under src/
    if "**/" in pattern and fnmatch.fnmatch(rel_path, pattern.replace("**/", "")):
        return True
    # A bare filename pattern matches at any depth
    if "/" not in pattern:
        return fnmatch.fnmatch(rel_path.rsplit("/", 1)[-1], pattern)
    return False
