"""Tests for the TestCase state machine."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from guest_harness.errors import (
    AssertionFailure,
    ConfigError,
    DependencyUnavailable,
    TransientTimeout,
    VmNotFoundError,
)
from guest_harness.models.base import Model
from guest_harness.scenarios.base import TestCase
from guest_harness.state import StateReporter, TestState


class EmptyConfig(Model):
    """Config without parameters."""


@dataclass(frozen=True, kw_only=True)
class ScriptedCase(TestCase[EmptyConfig]):
    """Test case raising configurable errors from each phase."""

    prepare_error: Exception | None = None
    execute_error: Exception | None = None
    message: str | None = "all good"
    calls: list[str] = field(default_factory=list)

    async def prepare(self) -> None:
        self.calls.append("prepare")
        if self.prepare_error:
            raise self.prepare_error

    async def execute(self) -> str | None:
        self.calls.append("execute")
        if self.execute_error:
            raise self.execute_error
        return self.message


@pytest.fixture
def reporter(tmp_path: Path) -> StateReporter:
    """Create a reporter writing into a temporary home."""
    return StateReporter(tmp_path / "state.txt", tmp_path / "summary.log")


async def test_completes_when_execute_returns(reporter: StateReporter) -> None:
    """Returns True and reports Completed."""
    case = ScriptedCase(config=EmptyConfig(), reporter=reporter)

    assert await case.run() is True
    assert reporter.state is TestState.COMPLETED
    assert reporter.state_file.read_text().strip() == "TestCompleted"
    assert "all good" in reporter.summary_log.read_text()
    assert case.calls == ["prepare", "execute"]


@pytest.mark.parametrize(
    "error",
    [ConfigError("bad parameter"), VmNotFoundError("no such VM")],
)
async def test_prepare_errors_abort_before_execute(
    reporter: StateReporter, error: Exception
) -> None:
    """Aborts on setup problems without running the steps."""
    case = ScriptedCase(config=EmptyConfig(), reporter=reporter, prepare_error=error)

    assert await case.run() is False
    assert reporter.state is TestState.ABORTED
    assert str(error) in reporter.summary_log.read_text()
    assert case.calls == ["prepare"]


@pytest.mark.parametrize(
    ("error", "state"),
    [
        (AssertionFailure("assigned memory is 0"), TestState.FAILED),
        (TransientTimeout("not saved in time"), TestState.FAILED),
        (DependencyUnavailable("host unreachable"), TestState.ABORTED),
        (RuntimeError("boom"), TestState.ABORTED),
    ],
)
async def test_execute_errors_map_to_terminal_states(
    reporter: StateReporter, error: Exception, state: TestState
) -> None:
    """Maps each error kind to exactly one terminal state."""
    case = ScriptedCase(config=EmptyConfig(), reporter=reporter, execute_error=error)

    assert await case.run() is False
    assert reporter.state is state
    assert str(error) in reporter.summary_log.read_text()


async def test_unexpected_setup_error_aborts(reporter: StateReporter) -> None:
    """Aborts when setup crashes with an unexpected exception."""
    case = ScriptedCase(
        config=EmptyConfig(), reporter=reporter, prepare_error=KeyError("x")
    )

    assert await case.run() is False
    assert reporter.state is TestState.ABORTED


async def test_does_not_restart_a_started_reporter(reporter: StateReporter) -> None:
    """Keeps summary lines written before run was called."""
    reporter.start()
    reporter.summary("Covers TC-1")
    case = ScriptedCase(config=EmptyConfig(), reporter=reporter, message=None)

    await case.run()

    assert reporter.summary_log.read_text().splitlines() == ["Covers TC-1"]


async def test_never_leaves_running(reporter: StateReporter) -> None:
    """Ends in a terminal state whatever execute raises."""
    case = ScriptedCase(
        config=EmptyConfig(), reporter=reporter, execute_error=ValueError("x")
    )

    await case.run()

    assert reporter.state_file.read_text().strip() != "TestRunning"
