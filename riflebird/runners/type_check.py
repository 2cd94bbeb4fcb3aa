import logging
import os
from typing import Optional

from riflebird.exceptions.process import ProcessSpawnError
from riflebird.runners.process import ProcessOptions, execute_process_command

logger = logging.getLogger("TypeCheck")

TYPESCRIPT_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")


def build_tsc_args(file_path: str, react: bool = False) -> list:
    args = ["tsc", "--noEmit", "--skipLibCheck", file_path]
    if react:
        args.extend(["--jsx", "react-jsx"])
    return args


async def validate_typescript(
    file_path: str,
    project_root: str,
    timeout_ms: int = 60000,
    react: bool = False,
) -> Optional[str]:
    """
    Type-check one file with `npx tsc --noEmit`.

    Returns the compiler output when the file has type errors, or None when
    it is clean. Non-TypeScript files are skipped. If tsc cannot be started
    or times out the check is skipped with a warning rather than reported
    as a type error.
    """
    if not file_path.endswith(TYPESCRIPT_EXTENSIONS):
        return None

    absolute_path = os.path.join(project_root, file_path)
    options = ProcessOptions(cwd=project_root, timeout_ms=timeout_ms)

    try:
        result = await execute_process_command(
            "npx", build_tsc_args(absolute_path, react=react), options
        )
    except ProcessSpawnError as e:
        logger.warning("Skipping type check, tsc unavailable: %s", e.message)
        return None

    if result.timed_out:
        logger.warning("Type check of %s timed out after %sms", file_path, timeout_ms)
        return None

    if result.exit_code == 0:
        return None

    # tsc reports diagnostics on stdout; stderr is mostly npx noise
    errors = result.stdout if result.stdout.strip() else result.stderr
    logger.debug("Type check failed for %s: %s", file_path, errors)
    return errors or f"tsc exited with code {result.exit_code}"
