"""External process execution.

Provides ``run_command()``, the only path by which pg-backup talks to
``pg_dump``, ``pg_restore`` and ``psql``. Commands are launched from an
argv list (never through a shell), so connection strings and file paths
need no quoting.

Usage:
    from pg_backup.runner import run_command

    result = await run_command(["pg_dump", url, "-f", "out.sql"], timeout=600)
    print(result.stderr)
"""

import asyncio
import logging
from collections.abc import Sequence

from pydantic import BaseModel

from pg_backup.errors import CommandError, CommandTimeoutError

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Outcome of one external command invocation."""

    args: list[str]
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def program(self) -> str:
        return self.args[0] if self.args else ""


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a still-running child and reap it."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


async def run_command(
    args: Sequence[str],
    *,
    timeout: float | None = None,
) -> CommandResult:
    """Run an external program to completion and capture its output.

    Args:
        args: Program and arguments. ``args[0]`` is resolved on ``PATH``.
        timeout: Seconds to wait before killing the process. ``None`` waits
            indefinitely.

    Returns:
        ``CommandResult`` with a zero return code.

    Raises:
        CommandError: The program could not be launched or exited non-zero.
        CommandTimeoutError: The program ran longer than ``timeout``.
    """
    argv = [str(a) for a in args]
    logger.debug("Running %s", argv[0], extra={"program": argv[0]})

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise CommandError(
            f"Could not launch '{argv[0]}': {e}",
            CommandResult(args=argv, stderr=str(e)),
        ) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError as e:
        await _terminate(process)
        raise CommandTimeoutError(
            f"'{argv[0]}' did not finish within {timeout}s and was killed",
            CommandResult(args=argv, returncode=process.returncode),
        ) from e
    except asyncio.CancelledError:
        await _terminate(process)
        raise

    result = CommandResult(
        args=argv,
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )

    if not result.success:
        detail = result.stderr.strip() or "no error output"
        raise CommandError(
            f"'{argv[0]}' exited with code {result.returncode}: {detail}",
            result,
        )

    return result
