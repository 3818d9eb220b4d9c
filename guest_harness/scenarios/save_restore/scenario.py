"""Verify Dynamic Memory counters survive saving and restoring VMs.

A dependent VM is started next to the VM under test to put pressure on
host memory. Both VMs must report positive assigned and demand memory
after the dependent VM starts and after every save/restore of either VM.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from guest_harness.errors import (
    AssertionFailure,
    ConfigError,
    DependencyUnavailable,
    HarnessError,
    TransientTimeout,
    VmNotReportingError,
    VmStartError,
)
from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.models.vm import MemoryCounters
from guest_harness.poller import poll
from guest_harness.scenarios.base import TestCase
from guest_harness.scenarios.save_restore.config import SaveRestoreConfig
from guest_harness.state import StateReporter

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SaveRestoreScenario(TestCase[SaveRestoreConfig]):
    """Saves and restores both VMs and re-checks memory counters each time."""

    hypervisor: HypervisorProvider

    @classmethod
    def create(
        cls,
        config: SaveRestoreConfig,
        reporter: StateReporter,
        hypervisor: HypervisorProvider | None = None,
    ) -> "SaveRestoreScenario":
        """Build the scenario on top of an open hypervisor backend."""
        if hypervisor is None:
            raise ConfigError("The save/restore scenario needs a hypervisor backend")
        return cls(config=config, reporter=reporter, hypervisor=hypervisor)

    async def prepare(self) -> None:
        """Check both VMs exist and the dependent VM is not running yet."""
        if self.config.vm_name == self.config.vm2_name:
            raise ConfigError("vmName and vm2Name must name different VMs")

        if self.config.tc_covered:
            self.reporter.summary(f"Covers {self.config.tc_covered}")

        vm = await self.hypervisor.get_vm(self.config.vm_name)
        if vm.state != "Running":
            raise DependencyUnavailable(
                f"VM {vm.name} must be running, it is {vm.state}"
            )

        vm2 = await self.hypervisor.get_vm(self.config.vm2_name)
        if vm2.state not in ("Off", "Saved"):
            raise DependencyUnavailable(
                f"Dependent VM {vm2.name} must be off or saved, it is {vm2.state}"
            )

    async def execute(self) -> str:
        """Start the dependent VM, then save and restore both VMs."""
        vms = (self.config.vm_name, self.config.vm2_name)

        async with self.dependent_vm():
            for name in vms:
                await self.require_memory(name, "after starting the dependent VM")

            for round_no in range(1, self.config.rounds + 1):
                for name in vms:
                    await self.save_and_restore(name)
                    await self.require_memory(name, f"after restore round {round_no}")

        return (
            f"Memory counters of {' and '.join(vms)} stayed positive "
            f"across {self.config.rounds} save/restore round(s)"
        )

    @asynccontextmanager
    async def dependent_vm(self) -> AsyncGenerator[str, None]:
        """Start the dependent VM and force it off again on exit.

        The VM is turned off on every exit path once a start was attempted.
        """
        name = self.config.vm2_name
        try:
            await self.start_dependent_vm()
            yield name
        finally:
            log.info("Stopping dependent VM %s", name)
            try:
                await self.hypervisor.stop_vm(name, force=True)
            except Exception as exc:
                log.warning(
                    "Unable to stop dependent VM %s: %s", name, exc, exc_info=True
                )

    async def start_dependent_vm(self) -> None:
        """Start the dependent VM, retrying a bounded number of times.

        Raises:
            VmStartError: If the VM never reached Running
            VmNotReportingError: If it ran but never reported memory counters

        """
        name = self.config.vm2_name
        error: HarnessError | None = None

        for attempt in range(1, self.config.tries + 1):
            if attempt > 1:
                await asyncio.sleep(self.config.start_retry_delay)
            log.info(
                "Starting dependent VM %s (attempt %d/%d)",
                name,
                attempt,
                self.config.tries,
            )

            try:
                vm = await self.hypervisor.get_vm(name)
                if vm.state != "Running":
                    await self.hypervisor.start_and_wait(
                        name,
                        timeout=self.config.start_timeout,
                        poll_interval=self.config.poll_interval,
                    )
            except VmStartError as exc:
                log.warning("Attempt %d: %s", attempt, exc)
                error = exc
                continue

            counters = await self.wait_for_memory(name)
            if counters.reporting:
                return
            error = VmNotReportingError(
                f"Dependent VM {name} is running but reports no memory "
                f"(assigned={counters.assigned}, demand={counters.demand})"
            )
            log.warning("Attempt %d: %s", attempt, error)

        if error is None:
            raise VmStartError(f"Dependent VM {name} was never started")
        raise error

    async def save_and_restore(self, name: str) -> None:
        """Save a VM, let the host settle, then start it again."""
        log.info("Saving VM %s", name)
        await self.hypervisor.save_vm(name)
        saved = await self.hypervisor.wait_for_state(
            name,
            "Saved",
            timeout=self.config.start_timeout,
            poll_interval=self.config.poll_interval,
        )
        if saved.timed_out:
            raise TransientTimeout(
                f"VM {name} was not saved within {self.config.start_timeout} seconds"
            )
        await asyncio.sleep(self.config.settle_delay)

        log.info("Restoring VM %s", name)
        try:
            await self.hypervisor.start_and_wait(
                name,
                timeout=self.config.start_timeout,
                poll_interval=self.config.poll_interval,
            )
        except VmStartError as exc:
            raise AssertionFailure(f"VM {name} failed to restore: {exc}") from exc
        await asyncio.sleep(self.config.settle_delay)

    async def wait_for_memory(self, name: str) -> MemoryCounters:
        """Poll a VM's counters until both are positive or the window closes.

        Returns:
            The last counters read

        """
        last: list[MemoryCounters] = []

        async def sample() -> float:
            counters = await self.hypervisor.get_memory(name)
            log.debug(
                "VM %s assigned=%d demand=%d", name, counters.assigned, counters.demand
            )
            last.append(counters)
            return min(counters.assigned, counters.demand)

        await poll(
            sample,
            lambda v: v > 0,
            self.config.poll_interval,
            self.config.memory_window,
        )
        return last[-1]

    async def require_memory(self, name: str, checkpoint: str) -> None:
        """Fail unless both memory counters of a VM become positive.

        Raises:
            AssertionFailure: If a counter stays at or below zero

        """
        counters = await self.wait_for_memory(name)
        if not counters.reporting:
            raise AssertionFailure(
                f"VM {name} reports non-positive memory {checkpoint}: "
                f"assigned={counters.assigned}, demand={counters.demand}"
            )
        log.info(
            "VM %s %s: assigned=%dMB demand=%dMB",
            name,
            checkpoint,
            counters.assigned,
            counters.demand,
        )
