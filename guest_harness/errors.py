"""Error taxonomy for harness runs.

Each error maps to one terminal state when it reaches ``TestCase.run``:
``ConfigError`` and ``DependencyUnavailable`` abort the run,
``AssertionFailure`` and ``TransientTimeout`` fail it.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigError(HarnessError):
    """Missing or invalid test parameters."""


class DependencyUnavailable(HarnessError):
    """A required external entity is absent or unreachable."""


class AssertionFailure(HarnessError):
    """An observed value violates the scenario's expected condition."""


class TransientTimeout(HarnessError):
    """A poll or command did not reach the expected condition within budget."""


class CommandNotFoundError(DependencyUnavailable):
    """Raised when an external executable cannot be launched."""


class VmNotFoundError(DependencyUnavailable):
    """Raised when the hypervisor does not know a VM."""


class VmStartError(DependencyUnavailable):
    """Raised when a VM could not be brought to the Running state."""


class VmNotReportingError(AssertionFailure):
    """Raised when a VM runs but never reports memory counters."""
