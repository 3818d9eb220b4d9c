"""Models for virtual machine state reported by a hypervisor."""

from typing import Any, Literal, get_args

from pydantic import Field

from guest_harness.models.base import Model

type VmState = Literal[
    "Running",
    "Off",
    "Saved",
    "Paused",
    "Starting",
    "Saving",
    "Stopping",
    "Other",
]

KNOWN_STATES = frozenset(get_args(VmState.__value__))


def known_state(value: Any) -> str:
    """Return a reported state, or Other for states not tracked here."""
    text = str(value)
    return text if text in KNOWN_STATES else "Other"


class VmInfo(Model):
    """Identity and lifecycle state of a single VM."""

    name: str = Field(..., description="VM name as known to the hypervisor")
    state: VmState = Field(..., description="Current lifecycle state")
    heartbeat: str | None = Field(
        default=None, description="Integration services heartbeat, if reported"
    )


class MemoryCounters(Model):
    """Dynamic Memory counters of a VM, in megabytes."""

    assigned: int = Field(..., description="Memory currently assigned to the VM")
    demand: int = Field(..., description="Memory the guest reports it needs")

    @property
    def reporting(self) -> bool:
        """Whether both counters are positive."""
        return self.assigned > 0 and self.demand > 0
