"""Timeout-bounded external command execution that never raises.

``run_command`` reports what happened as a ``CommandResult``; ``execute_async``
and ``batch_execute`` collapse every non-success outcome to an empty string,
which is all the status line needs.

// [LAW:single-enforcer] Subprocess spawning for the status pipeline happens only here.
// [LAW:dataflow-not-control-flow] Failure is a CommandStatus value, not an exception.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 0.5
DEFAULT_ENCODING = "utf-8"

Command = str | Sequence[str]


class CommandStatus(Enum):
    OK = "ok"
    FAILED = "failed"  # nonzero exit or spawn error
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"  # executable or working directory missing


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    status: CommandStatus
    returncode: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.OK

    @property
    def text(self) -> str:
        """Output for callers that only care about success: stdout or ""."""
        return self.stdout if self.ok else ""


def _argv(command: Command) -> list[str]:
    if isinstance(command, str):
        return shlex.split(command)
    return [str(part) for part in command]


def _describe(command: Command) -> str:
    return command if isinstance(command, str) else shlex.join(_argv(command))


async def _reap(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        return
    await proc.wait()


async def run_command(
    command: Command,
    *,
    cwd: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    encoding: str = DEFAULT_ENCODING,
) -> CommandResult:
    """Run one command and capture its stripped stdout."""
    workdir = cwd or os.getcwd()
    try:
        argv = _argv(command)
    except ValueError as exc:
        logger.debug("command not parseable %r: %s", command, exc)
        return CommandResult("", CommandStatus.FAILED)
    if not argv:
        return CommandResult("", CommandStatus.FAILED)

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=workdir,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        logger.debug("command not runnable %s (cwd=%s): %s", _describe(command), workdir, exc)
        return CommandResult("", CommandStatus.NOT_FOUND)
    except (OSError, ValueError) as exc:
        # ValueError: embedded NUL byte in an argument or the cwd.
        logger.debug("command spawn failed %r: %s", command, exc)
        return CommandResult("", CommandStatus.FAILED)

    try:
        stdout, _stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug("command timed out after %.3fs: %s", timeout, _describe(command))
        await _reap(proc)
        return CommandResult("", CommandStatus.TIMEOUT)

    try:
        text = stdout.decode(encoding, errors="replace").strip()
    except LookupError as exc:
        logger.debug("unknown encoding %r for %s: %s", encoding, _describe(command), exc)
        return CommandResult("", CommandStatus.FAILED, proc.returncode)
    if proc.returncode != 0:
        logger.debug("command exited %s: %s", proc.returncode, _describe(command))
        return CommandResult(text, CommandStatus.FAILED, proc.returncode)
    return CommandResult(text, CommandStatus.OK, proc.returncode)


async def execute_async(
    command: Command,
    *,
    cwd: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    encoding: str = DEFAULT_ENCODING,
) -> str:
    """Run a command and return its stdout, or "" on timeout or failure."""
    result = await run_command(command, cwd=cwd, timeout=timeout, encoding=encoding)
    return result.text


async def batch_execute(
    commands: Sequence[Command],
    *,
    cwd: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    encoding: str = DEFAULT_ENCODING,
) -> list[str]:
    """Run all commands concurrently; each slot falls back to "" on its own."""
    results = await asyncio.gather(
        *(execute_async(cmd, cwd=cwd, timeout=timeout, encoding=encoding) for cmd in commands),
        return_exceptions=True,
    )
    outputs: list[str] = []
    for cmd, result in zip(commands, results):
        if isinstance(result, BaseException):
            logger.debug("command raised %r: %s", result, _describe(cmd))
            outputs.append("")
        else:
            outputs.append(result)
    return outputs
