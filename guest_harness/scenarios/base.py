"""Abstract base class for verification scenarios."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel

from guest_harness.errors import (
    AssertionFailure,
    ConfigError,
    DependencyUnavailable,
    TransientTimeout,
)
from guest_harness.state import StateReporter, TestState

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TestCase[ConfigT: BaseModel](ABC):
    """One verification scenario run against external collaborators.

    ``run`` drives the state machine Init -> Running -> terminal state:
    ``prepare`` performs the Init checks, ``execute`` the domain steps.
    Errors raised by either are converted into exactly one terminal report.
    """

    __test__ = False

    config: ConfigT
    reporter: StateReporter

    async def prepare(self) -> None:
        """Validate the environment before any step with side effects.

        Raises:
            ConfigError: If the configuration is unusable
            DependencyUnavailable: If a required entity is missing

        """

    @abstractmethod
    async def execute(self) -> str | None:
        """Run the scenario steps.

        Returns:
            Optional summary line recorded on completion

        Raises:
            AssertionFailure: If an observed value violates an expectation
            TransientTimeout: If a condition was not reached in time
            DependencyUnavailable: If an external entity disappeared

        """

    async def run(self) -> bool:
        """Run the scenario and return whether it completed."""
        if self.reporter.state is None:
            self.reporter.start()

        try:
            await self.prepare()
        except (ConfigError, DependencyUnavailable) as exc:
            self.reporter.report_aborted(str(exc))
            return False
        except Exception as exc:
            log.exception("Scenario setup crashed")
            self.reporter.report_aborted(f"Unexpected error during setup: {exc}")
            return False

        try:
            message = await self.execute()
        except (AssertionFailure, TransientTimeout) as exc:
            self.reporter.report_failed(str(exc))
        except (ConfigError, DependencyUnavailable) as exc:
            self.reporter.report_aborted(str(exc))
        except Exception as exc:
            log.exception("Scenario crashed")
            self.reporter.report_aborted(f"Unexpected error: {exc}")
        else:
            self.reporter.report_completed(message)

        return self.reporter.state is TestState.COMPLETED
