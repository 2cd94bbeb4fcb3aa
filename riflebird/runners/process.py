"""
Process Executor
================

Runs exactly one external command and resolves with its captured output.

A non-zero exit code and a timeout are both normal results. Only a failure
to start the process at all raises (ProcessSpawnError).
"""

import asyncio
import codecs
import logging
import os
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Union

from riflebird.exceptions.process import ProcessSpawnError

logger = logging.getLogger("ProcessExecutor")

# How long to wait for stdout/stderr to drain after the process has exited.
# A grandchild that inherited the pipes can keep them open indefinitely.
READER_DRAIN_TIMEOUT = 2.0
STREAM_LIMIT = 2**16


class StdioMode(str, Enum):
    PIPE = "pipe"
    INHERIT = "inherit"
    IGNORE = "ignore"


def _environment_snapshot() -> Mapping[str, str]:
    return MappingProxyType(dict(os.environ))


@dataclass(frozen=True)
class ProcessOptions:
    """
    Immutable execution options.

    env is an explicit read-only mapping. When not given, a snapshot of the
    current environment is taken at construction time, so later changes to
    os.environ do not affect an options record that already exists.
    """

    cwd: Union[str, os.PathLike]
    timeout_ms: int = 0
    env: Mapping[str, str] = field(default_factory=_environment_snapshot)
    stdio: StdioMode = StdioMode.PIPE

    def __post_init__(self):
        if not isinstance(self.env, MappingProxyType):
            object.__setattr__(self, "env", MappingProxyType(dict(self.env)))
        object.__setattr__(self, "stdio", StdioMode(self.stdio))

    def with_env(self, **overrides: str) -> "ProcessOptions":
        """Copy of these options with extra environment variables."""
        merged = dict(self.env)
        merged.update(overrides)
        return ProcessOptions(
            cwd=self.cwd, timeout_ms=self.timeout_ms, env=merged, stdio=self.stdio
        )


@dataclass(frozen=True)
class ProcessExecutionResult:
    stdout: str
    stderr: str
    exit_code: Optional[int]
    timed_out: bool = False


def _stdio_target(mode: StdioMode):
    if mode is StdioMode.PIPE:
        return asyncio.subprocess.PIPE
    if mode is StdioMode.IGNORE:
        return asyncio.subprocess.DEVNULL
    return None


class _ExitAwareProtocol(asyncio.subprocess.SubprocessStreamProtocol):
    """
    Stream protocol that also reports process exit on its own.

    Process.wait() only returns after every pipe has closed, which never
    happens while a grandchild keeps an inherited pipe open.
    """

    def __init__(self, limit: int, loop: asyncio.AbstractEventLoop):
        super().__init__(limit=limit, loop=loop)
        self.exited: asyncio.Future = loop.create_future()

    def process_exited(self) -> None:
        super().process_exited()
        if not self.exited.done():
            self.exited.set_result(None)


async def _drain(stream: Optional[asyncio.StreamReader], chunks: List[str]) -> None:
    """Append decoded chunks from a pipe until EOF."""
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await stream.read(65536)
        if not data:
            break
        text = decoder.decode(data)
        if text:
            chunks.append(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        chunks.append(tail)


async def execute_process_command(
    command: str, args: Sequence[str], options: ProcessOptions
) -> ProcessExecutionResult:
    """
    Spawn `command` with `args` and wait for it to finish.

    When options.timeout_ms is positive a single timer is armed. On firing it
    sends SIGTERM once and the result is marked timed_out; the call still
    returns normally with whatever output was captured.

    Raises:
        ProcessSpawnError: the process could not be started.
    """
    argv = [command, *args]
    target = _stdio_target(options.stdio)
    logger.debug("Spawning %s (cwd=%s)", argv, options.cwd)

    loop = asyncio.get_running_loop()
    try:
        transport, protocol = await loop.subprocess_exec(
            lambda: _ExitAwareProtocol(limit=STREAM_LIMIT, loop=loop),
            *argv,
            cwd=str(options.cwd),
            env=dict(options.env),
            stdin=subprocess.DEVNULL,
            stdout=target,
            stderr=target,
        )
    except OSError as e:
        raise ProcessSpawnError(
            f"Failed to start '{command}': {e}",
            command=command,
            args=args,
            original_error=e,
        ) from e

    proc = asyncio.subprocess.Process(transport, protocol, loop)

    stdout_chunks: List[str] = []
    stderr_chunks: List[str] = []
    readers = [
        asyncio.create_task(_drain(proc.stdout, stdout_chunks)),
        asyncio.create_task(_drain(proc.stderr, stderr_chunks)),
    ]

    timed_out = False

    def _on_timeout() -> None:
        nonlocal timed_out
        if proc.returncode is not None:
            return
        timed_out = True
        logger.warning(
            "Process '%s' exceeded %sms, sending SIGTERM", command, options.timeout_ms
        )
        try:
            proc.terminate()
        except ProcessLookupError:
            pass

    timer = None
    if options.timeout_ms > 0:
        timer = loop.call_later(options.timeout_ms / 1000.0, _on_timeout)

    try:
        await protocol.exited
        returncode = transport.get_returncode()
        _, pending = await asyncio.wait(readers, timeout=READER_DRAIN_TIMEOUT)
        if pending:
            logger.debug("Output pipes of '%s' still open after exit", command)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
    finally:
        if timer is not None:
            timer.cancel()
        for task in readers:
            if not task.done():
                task.cancel()
        # Drops pipes a grandchild may still hold. Kills the child only if it
        # is still running, which happens only when this call is cancelled.
        transport.close()

    # Negative return codes mean the process was killed by that signal
    exit_code = returncode if returncode >= 0 else None

    return ProcessExecutionResult(
        stdout="".join(stdout_chunks),
        stderr="".join(stderr_chunks),
        exit_code=exit_code,
        timed_out=timed_out,
    )
