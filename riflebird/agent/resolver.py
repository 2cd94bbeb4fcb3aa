import logging
import posixpath
from typing import Awaitable, Callable, List

from riflebird.agent.structs import NotFound, Resolved, ResolutionOutcome
from riflebird.config.constants import EXTENSIONLESS_CANDIDATES, RELATED_EXTENSIONS
from riflebird.exceptions.files import ProjectFileError

logger = logging.getLogger("FileResolver")

FileReader = Callable[[str], Awaitable[str]]


def candidate_paths(requested_path: str) -> List[str]:
    """
    Paths to try for a requested file, in priority order.

    The exact path always comes first. Substitutes share its base name and
    never repeat the original extension.
    """
    base, ext = posixpath.splitext(requested_path)
    if ext:
        substitutes = RELATED_EXTENSIONS.get(ext.lower(), ())
    else:
        substitutes = EXTENSIONLESS_CANDIDATES

    candidates = [requested_path]
    for sub in substitutes:
        if sub == ext:
            continue
        candidate = base + sub
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


class FileResolver:
    """Maps an AI-requested path to readable project content."""

    def __init__(self, reader: FileReader):
        self._reader = reader

    async def resolve(self, requested_path: str) -> ResolutionOutcome:
        attempted: List[str] = []
        first_error = ""

        for candidate in candidate_paths(requested_path):
            attempted.append(candidate)
            try:
                content = await self._reader(candidate)
            except (ProjectFileError, OSError, UnicodeDecodeError) as e:
                if not first_error:
                    first_error = str(e)
                continue

            if candidate != requested_path:
                logger.info("Resolved %s to %s", requested_path, candidate)
            return Resolved(
                requested_path=requested_path, actual_path=candidate, content=content
            )

        logger.info("Could not resolve %s (tried %d paths)", requested_path, len(attempted))
        return NotFound(
            requested_path=requested_path,
            attempted_paths=tuple(attempted),
            reason=first_error,
        )
