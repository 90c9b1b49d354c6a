"""Bounded external command execution.

Every external operation (git, package manager, doc generator, openssl) is
an awaitable ``run_command`` call.  The child runs with an explicit ``cwd``;
the parent's working directory is never changed.  When the time bound is
exceeded the child and every process it started are killed and the child
is reaped before ``StepTimeoutError`` is raised, so a hung tool cannot
stall the rest of the run.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from docmeta.core.errors import StepTimeoutError
from docmeta.models.builds import BuildStep

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
COMMAND_NOT_FOUND = 127

# Seconds to wait for a killed process group to be reaped.
REAP_TIMEOUT = 5.0


class CommandResult(BaseModel):
    """Exit status and combined stdout/stderr of one command."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 20) -> str:
        """Last *lines* lines of output, for error messages."""
        return "\n".join(self.output.splitlines()[-lines:])


class CommandRunner(Protocol):
    """Anything that can run a command the way ``run_command`` does."""

    async def __call__(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        step: BuildStep | str = "command",
        version: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult: ...


async def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    step: BuildStep | str = "command",
    version: str | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run *args* to completion and return its result.

    Parameters
    ----------
    args:
        Executable followed by its arguments; no shell is involved.
    cwd:
        Working directory of the child process.
    timeout:
        Seconds before the child is killed. ``None`` waits forever.
    step, version:
        Labels carried by ``StepTimeoutError`` for diagnostics.
    env:
        Extra environment variables layered over the current environment.

    Raises
    ------
    StepTimeoutError
        If the command does not finish within *timeout*.
    """
    argv = tuple(str(a) for a in args)
    child_env = {**os.environ, **env} if env else None
    logger.debug("Running %s with %d argument(s) (cwd=%s)", argv[0], len(argv) - 1, cwd)

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd) if cwd is not None else None,
            env=child_env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            start_new_session=True,
        )
    except FileNotFoundError as exc:
        return CommandResult(args=argv, returncode=COMMAND_NOT_FOUND, output=str(exc))
    except PermissionError as exc:
        return CommandResult(args=argv, returncode=126, output=str(exc))

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill_group(proc)
        logger.warning("Killed %s after %ss", argv[0], timeout)
        raise StepTimeoutError(step, timeout or 0.0, version=version) from None
    except asyncio.CancelledError:
        await _kill_group(proc)
        raise

    output = stdout.decode("utf-8", errors="replace") if stdout else ""
    return CommandResult(args=argv, returncode=proc.returncode or 0, output=output)


async def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* and every process it started, then reap it.

    Package managers fork helpers that inherit the output pipe; killing only
    the direct child would leave the pipe open until they exit.
    """
    try:
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass
    try:
        await asyncio.wait_for(proc.wait(), timeout=REAP_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("Process %d not reaped within %ss", proc.pid, REAP_TIMEOUT)
