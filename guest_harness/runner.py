"""Invocation of external executables with structured results."""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from guest_harness.errors import CommandNotFoundError, TransientTimeout

log = logging.getLogger(__name__)

type CommandOutcome = Literal["success", "soft-failure"]


@dataclass(frozen=True, kw_only=True)
class CommandResult:
    """Exit code and captured output of a finished command."""

    command: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0

    def contains(self, pattern: str) -> bool:
        """Check stdout for a regular expression."""
        return re.search(pattern, self.stdout, re.MULTILINE) is not None


@dataclass(frozen=True, kw_only=True)
class CommandRunner:
    """Runs external commands and interprets their outcome.

    Missing executables are hard failures and raise; non-zero exit codes
    are returned to the caller, which decides how severe they are.
    """

    cwd: Path | None = None
    timeout: float | None = None

    async def run(
        self,
        command: str,
        *args: str,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command to completion and capture its output.

        Args:
            command: Executable name or path
            args: Arguments passed verbatim
            timeout: Seconds to wait before killing the process
                (defaults to the runner's timeout)

        Returns:
            Exit code, stdout and stderr of the process

        Raises:
            CommandNotFoundError: If the executable cannot be launched
            TransientTimeout: If the process outlives the timeout

        """
        argv = (command, *args)
        log.debug("Running %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise CommandNotFoundError(f"Cannot execute {command}: {exc}") from exc

        limit = timeout if timeout is not None else self.timeout
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), limit)
        except TimeoutError as exc:
            process.kill()
            await process.wait()
            raise TransientTimeout(
                f"{command} did not finish within {limit} seconds"
            ) from exc

        result = CommandResult(
            command=argv,
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

        if not result.ok:
            log.warning(
                "%s exited with %d: %s",
                command,
                result.exit_code,
                result.stderr.strip(),
            )
        return result

    @staticmethod
    def classify(
        result: CommandResult,
        expect: str | None = None,
        *,
        present: bool = True,
    ) -> CommandOutcome:
        """Interpret a result as success or soft failure.

        Args:
            result: Result returned by ``run``
            expect: Optional pattern that must (or must not) appear in stdout
            present: Whether ``expect`` is required to be present

        """
        if not result.ok:
            return "soft-failure"
        if expect is not None and result.contains(expect) != present:
            return "soft-failure"
        return "success"
