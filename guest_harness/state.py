"""Test lifecycle state marker and human-readable summary log."""

import enum
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_COMPLETED_LINE = "Test completed successfully"


class TestState(enum.StrEnum):
    """States written to the marker file read by the invoking automation."""

    __test__ = False

    RUNNING = "TestRunning"
    COMPLETED = "TestCompleted"
    ABORTED = "TestAborted"
    FAILED = "TestFailed"

    @property
    def terminal(self) -> bool:
        """Whether a run in this state has finished."""
        return self is not TestState.RUNNING


class StateReporter:
    """Persists the state marker and appends to the summary log.

    The marker holds a single value that is replaced on every transition.
    The summary log is reset by ``start`` and only appended to afterwards.
    """

    def __init__(self, state_file: Path, summary_log: Path) -> None:
        self.state_file = state_file
        self.summary_log = summary_log
        self._state: TestState | None = None
        self._summary_lines = 0

    @property
    def state(self) -> TestState | None:
        """Last reported state, None before the first report."""
        return self._state

    def start(self) -> None:
        """Reset the summary log and report the run as running."""
        self.summary_log.parent.mkdir(parents=True, exist_ok=True)
        self.summary_log.write_text("")
        self._summary_lines = 0
        self._state = None
        self.report_running()

    def summary(self, line: str) -> None:
        """Append a line to the summary log."""
        with self.summary_log.open("a") as fh:
            fh.write(f"{line}\n")
            fh.flush()
            os.fsync(fh.fileno())
        self._summary_lines += 1

    def report_running(self) -> None:
        """Mark the run as running unless it already ended."""
        if not self._can_report(TestState.RUNNING, None):
            return
        log.info("Updating test case state to running")
        self._write_marker(TestState.RUNNING)

    def report_completed(self, message: str | None = None) -> None:
        """Mark the run as completed, optionally noting why in the summary."""
        if not self._can_report(TestState.COMPLETED, message):
            return
        if message or not self._summary_lines:
            self.summary(message or DEFAULT_COMPLETED_LINE)
        log.info("Updating test case state to completed")
        self._write_marker(TestState.COMPLETED)

    def report_aborted(self, reason: str) -> None:
        """Mark the run as aborted by a setup problem."""
        self._report_unsuccessful(TestState.ABORTED, reason)

    def report_failed(self, reason: str) -> None:
        """Mark the run as failed by a violated expectation."""
        self._report_unsuccessful(TestState.FAILED, reason)

    def _report_unsuccessful(self, state: TestState, reason: str) -> None:
        if not self._can_report(state, reason):
            return
        log.error("%s: %s", state.value, reason)
        self.summary(reason)
        self._write_marker(state)

    def _can_report(self, state: TestState, detail: str | None) -> bool:
        if self._state is not None and self._state.terminal:
            log.warning(
                "Ignoring %s after terminal state %s (%s)",
                state.value,
                self._state.value,
                detail or "no detail",
            )
            return False
        return True

    def _write_marker(self, state: TestState) -> None:
        """Replace the marker file and make sure it reached the disk."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.state_file.with_name(f".{self.state_file.name}.tmp")
        with tmp_path.open("w") as fh:
            fh.write(f"{state.value}\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, self.state_file)
        self._state = state
