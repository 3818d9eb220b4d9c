"""Abstract base class for hypervisor management backends."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from guest_harness.errors import VmStartError
from guest_harness.models.vm import MemoryCounters, VmInfo, VmState
from guest_harness.poller import PollResult, poll

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HypervisorProvider(ABC):
    """Abstract base for hypervisor management backends.

    Implementations translate VM lifecycle requests into whatever the
    platform offers (cmdlets, HTTP endpoints) and return validated models.
    """

    @abstractmethod
    async def get_vm(self, name: str) -> VmInfo:
        """Look up a VM.

        Raises:
            VmNotFoundError: If the hypervisor does not know the VM

        """

    @abstractmethod
    async def start_vm(self, name: str) -> None:
        """Start or resume a VM.

        Raises:
            VmStartError: If the hypervisor rejects the request

        """

    @abstractmethod
    async def stop_vm(self, name: str, *, force: bool = False) -> None:
        """Stop a VM, turning it off immediately when ``force`` is set."""

    @abstractmethod
    async def save_vm(self, name: str) -> None:
        """Save a running VM's state to disk."""

    @abstractmethod
    async def get_memory(self, name: str) -> MemoryCounters:
        """Return the VM's assigned and demand memory counters."""

    async def wait_for_state(
        self,
        name: str,
        state: VmState,
        timeout: float = 120,
        poll_interval: float = 5,
    ) -> PollResult:
        """Poll a VM until it reaches the given lifecycle state.

        Args:
            name: VM name
            state: Expected lifecycle state
            timeout: Maximum wait time in seconds
            poll_interval: Seconds between polls

        Returns:
            Poll result whose value is 1 once the state was reached

        """
        async def in_state() -> float:
            info = await self.get_vm(name)
            log.debug("VM %s is %s, waiting for %s", name, info.state, state)
            return 1 if info.state == state else 0

        return await poll(in_state, lambda v: v > 0, poll_interval, timeout)

    async def start_and_wait(
        self, name: str, timeout: float = 120, poll_interval: float = 5
    ) -> None:
        """Start a VM and block until the hypervisor reports it Running.

        Raises:
            VmStartError: If the VM does not reach Running in time

        """
        await self.start_vm(name)
        result = await self.wait_for_state(name, "Running", timeout, poll_interval)
        if result.timed_out:
            raise VmStartError(
                f"VM {name} did not reach Running within {timeout} seconds"
            )
