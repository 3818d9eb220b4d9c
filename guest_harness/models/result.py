"""Models for scenario run results."""

from dataclasses import dataclass

from guest_harness.state import TestState


@dataclass(frozen=True, kw_only=True)
class ScenarioResult:
    """Outcome of one scenario run as seen by the invoking CI process."""

    scenario: str
    state: TestState
    duration: float
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Whether the run reached the Completed state."""
        return self.state is TestState.COMPLETED
