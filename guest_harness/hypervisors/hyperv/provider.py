"""Hyper-V backend driven through PowerShell cmdlets."""

import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from guest_harness.errors import (
    DependencyUnavailable,
    VmNotFoundError,
    VmStartError,
)
from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.hypervisors.hyperv.config import HyperVConfig
from guest_harness.hypervisors.hyperv.models import MemoryRecord, VmRecord
from guest_harness.models.vm import MemoryCounters, VmInfo
from guest_harness.runner import CommandResult, CommandRunner

log = logging.getLogger(__name__)

VM_NOT_FOUND_MARKER = "unable to find a virtual machine"

GET_VM_SCRIPT = (
    "Get-VM -Name {name} -ComputerName {server} -ErrorAction Stop"
    " | Select-Object Name,"
    " @{{n='State';e={{$_.State.ToString()}}}},"
    " @{{n='Heartbeat';e={{\"$($_.Heartbeat)\"}}}}"
    " | ConvertTo-Json -Compress"
)

GET_MEMORY_SCRIPT = (
    "Get-VM -Name {name} -ComputerName {server} -ErrorAction Stop"
    " | Select-Object"
    " @{{n='MemoryAssignedMB';e={{[int64]($_.MemoryAssigned / 1MB)}}}},"
    " @{{n='MemoryDemandMB';e={{[int64]($_.MemoryDemand / 1MB)}}}}"
    " | ConvertTo-Json -Compress"
)


def _quote(value: str) -> str:
    """Render a value as a single-quoted PowerShell string literal."""
    return "'" + value.replace("'", "''") + "'"


@dataclass(frozen=True, kw_only=True)
class HyperVProvider(HypervisorProvider):
    """Hyper-V backend.

    Every operation is one PowerShell invocation; query cmdlets pipe their
    output through ``ConvertTo-Json`` so results are parsed in one place.
    """

    config: HyperVConfig
    runner: CommandRunner = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HyperVConfig
    ) -> AsyncGenerator["HyperVProvider", None]:
        """Create provider bound to the configured server."""
        yield cls(config=config, runner=CommandRunner(timeout=config.command_timeout))

    async def get_vm(self, name: str) -> VmInfo:
        """Look up a VM with ``Get-VM``."""
        data = await self._query(self._render(GET_VM_SCRIPT, name), name)
        try:
            record = VmRecord.model_validate(data)
        except ValidationError as exc:
            raise DependencyUnavailable(
                f"Unexpected Get-VM output for {name}: {exc}"
            ) from exc
        return VmInfo(name=record.name, state=record.state, heartbeat=record.heartbeat)

    async def start_vm(self, name: str) -> None:
        """Start a VM with ``Start-VM``."""
        result = await self._cmdlet(f"Start-VM -Name {_quote(name)}")
        if not result.ok:
            self._raise_for_vm(result, name)
            raise VmStartError(f"Unable to start VM {name}: {result.stderr.strip()}")
        log.info("Started VM %s on %s", name, self.config.server)

    async def stop_vm(self, name: str, *, force: bool = False) -> None:
        """Stop a VM with ``Stop-VM``, turning it off when forced."""
        flags = " -Force -TurnOff" if force else " -Force"
        await self._checked(f"Stop-VM -Name {_quote(name)}{flags}", name, "stop")
        log.info("Stopped VM %s (force=%s)", name, force)

    async def save_vm(self, name: str) -> None:
        """Save a VM with ``Save-VM``."""
        await self._checked(f"Save-VM -Name {_quote(name)}", name, "save")
        log.info("Saved VM %s", name)

    async def get_memory(self, name: str) -> MemoryCounters:
        """Read assigned and demand memory from ``Get-VM``."""
        data = await self._query(self._render(GET_MEMORY_SCRIPT, name), name)
        try:
            record = MemoryRecord.model_validate(data)
        except ValidationError as exc:
            raise DependencyUnavailable(
                f"Unexpected memory counters for {name}: {exc}"
            ) from exc
        return MemoryCounters(assigned=record.assigned, demand=record.demand)

    def _render(self, template: str, name: str) -> str:
        return template.format(name=_quote(name), server=_quote(self.config.server))

    async def _cmdlet(self, script: str) -> CommandResult:
        """Run a lifecycle cmdlet against the configured server."""
        return await self._powershell(
            f"{script} -ComputerName {_quote(self.config.server)} -ErrorAction Stop"
        )

    async def _checked(self, script: str, name: str, action: str) -> None:
        result = await self._cmdlet(script)
        if not result.ok:
            self._raise_for_vm(result, name)
            raise DependencyUnavailable(
                f"Unable to {action} VM {name}: {result.stderr.strip()}"
            )

    async def _query(self, script: str, name: str) -> Any:
        result = await self._powershell(script)
        if not result.ok:
            self._raise_for_vm(result, name)
            raise DependencyUnavailable(
                f"Get-VM failed for {name} (exit {result.exit_code}): "
                f"{result.stderr.strip()}"
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise DependencyUnavailable(
                f"Get-VM returned non-JSON output for {name}: {result.stdout!r}"
            ) from exc

    async def _powershell(self, script: str) -> CommandResult:
        return await self.runner.run(
            self.config.powershell,
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            script,
        )

    def _raise_for_vm(self, result: CommandResult, name: str) -> None:
        if VM_NOT_FOUND_MARKER in result.stderr.lower():
            raise VmNotFoundError(
                f"VM {name} not found on {self.config.server}"
            )
