"""Subprocess and host utilities."""

import asyncio
import logging
import os
import shlex
import shutil
import subprocess
from typing import Callable, Iterable, List, Optional
from dataclasses import dataclass

from nginx_installer.errors import PreconditionError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    **kwargs
) -> CommandResult:
    """Run a command asynchronously."""
    logger.debug(f"Running command: {shlex.join(cmd)}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
        **kwargs
    )

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise subprocess.TimeoutExpired(cmd, timeout)

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode() if stdout else "",
        stderr=stderr.decode() if stderr else "",
    )

    if check and process.returncode != 0:
        error = subprocess.CalledProcessError(
            process.returncode, cmd
        )
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error

    return result


def require_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Fail unless the process runs with an effective uid of 0."""
    euid = geteuid()
    if euid != 0:
        raise PreconditionError(f"Must be run as root (effective uid is {euid})")


def require_tools(tools: Iterable[str]) -> None:
    """Fail if any of the given executables is not on PATH."""
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise PreconditionError(f"Required tools not found: {', '.join(missing)}")
