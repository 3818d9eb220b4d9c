"""Integration tests for the command runner using real processes."""

from collections.abc import Callable
from pathlib import Path

import pytest

from guest_harness.errors import CommandNotFoundError, TransientTimeout
from guest_harness.runner import CommandRunner

type FakeTool = Callable[[str, str], Path]


class TestRun:
    """Tests for CommandRunner.run."""

    async def test_captures_output_and_exit_code(self) -> None:
        """Returns stdout, stderr and the exit code."""
        result = await CommandRunner().run(
            "sh", "-c", "echo out; echo err >&2; exit 3"
        )

        assert result.exit_code == 3
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"
        assert not result.ok
        assert result.command == ("sh", "-c", "echo out; echo err >&2; exit 3")

    async def test_success(self) -> None:
        """Reports ok for exit code 0."""
        result = await CommandRunner().run("sh", "-c", "printf 'Key : a; Value : b'")

        assert result.ok
        assert CommandRunner.classify(result, r"Key : a") == "success"

    async def test_runs_in_working_directory(self, tmp_path: Path) -> None:
        """Runs the command in the configured directory."""
        result = await CommandRunner(cwd=tmp_path).run("pwd")

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    async def test_missing_executable_is_hard_failure(self, tmp_path: Path) -> None:
        """Raises CommandNotFoundError when the executable does not exist."""
        with pytest.raises(CommandNotFoundError, match="Cannot execute"):
            await CommandRunner().run(str(tmp_path / "nope"))

    async def test_non_executable_file_is_hard_failure(self, tmp_path: Path) -> None:
        """Raises CommandNotFoundError when the file lacks execute permission."""
        script = tmp_path / "script.sh"
        script.write_text("#!/bin/sh\necho hi\n")

        with pytest.raises(CommandNotFoundError):
            await CommandRunner().run(str(script))

    async def test_timeout_kills_process(self) -> None:
        """Raises TransientTimeout when the process runs too long."""
        with pytest.raises(TransientTimeout, match="did not finish within"):
            await CommandRunner(timeout=0.2).run("sleep", "5")

    async def test_runs_fake_tool(self, fake_tool: FakeTool) -> None:
        """Passes arguments through to the executable."""
        tool = fake_tool("echo_args", 'echo "$@"')

        result = await CommandRunner().run(str(tool), "-l", "-p", "3")

        assert result.stdout.strip() == "-l -p 3"
