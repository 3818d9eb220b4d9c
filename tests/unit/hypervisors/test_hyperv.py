"""Tests for the Hyper-V backend with a mocked command runner."""

from collections.abc import AsyncGenerator
from unittest.mock import Mock

import pytest

from guest_harness.errors import (
    DependencyUnavailable,
    VmNotFoundError,
    VmStartError,
)
from guest_harness.hypervisors.hyperv import HyperVConfig, HyperVProvider
from guest_harness.runner import CommandRunner
from guest_harness.testing.factories import CommandResultFactory
from guest_harness.testing.payloads import get_memory_json, get_vm_json

NOT_FOUND_STDERR = (
    'Get-VM : Hyper-V was unable to find a virtual machine with name "ghost".'
)


@pytest.fixture
def runner() -> Mock:
    """Create mock command runner."""
    return Mock(spec=CommandRunner)


@pytest.fixture
async def provider(runner: Mock) -> AsyncGenerator[HyperVProvider, None]:
    """Create provider bound to a test server."""
    config = HyperVConfig(server="hv01", powershell="pwsh")
    async with HyperVProvider.from_config(config) as impl:
        yield HyperVProvider(config=impl.config, runner=runner)


def script_of(runner: Mock) -> str:
    """Return the PowerShell script passed to the last run call."""
    args = runner.run.await_args.args
    assert args[:4] == ("pwsh", "-NoProfile", "-NonInteractive", "-Command")
    return str(args[4])


class TestGetVm:
    """Tests for get_vm."""

    async def test_parses_vm(self, provider: HyperVProvider, runner: Mock) -> None:
        """Validates Get-VM JSON into VmInfo."""
        runner.run.return_value = CommandResultFactory.build(
            stdout=get_vm_json(name="vm1", state="Saved")
        )

        vm = await provider.get_vm("vm1")

        assert vm.name == "vm1"
        assert vm.state == "Saved"
        script = script_of(runner)
        assert "Get-VM -Name 'vm1' -ComputerName 'hv01'" in script
        assert "ConvertTo-Json" in script

    async def test_collapses_unknown_states(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Maps states the harness does not track to Other."""
        runner.run.return_value = CommandResultFactory.build(
            stdout=get_vm_json(state="RunningCritical")
        )

        vm = await provider.get_vm("vm1")

        assert vm.state == "Other"

    async def test_raises_vm_not_found(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Recognises the Hyper-V not-found error."""
        runner.run.return_value = CommandResultFactory.build(
            exit_code=1, stdout="", stderr=NOT_FOUND_STDERR
        )

        with pytest.raises(VmNotFoundError, match="ghost|not found"):
            await provider.get_vm("ghost")

    async def test_raises_on_garbage_output(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Treats non-JSON output as an unavailable dependency."""
        runner.run.return_value = CommandResultFactory.build(stdout="WARNING: ...")

        with pytest.raises(DependencyUnavailable, match="non-JSON"):
            await provider.get_vm("vm1")


class TestGetMemory:
    """Tests for get_memory."""

    async def test_parses_counters(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Reads assigned and demand memory in megabytes."""
        runner.run.return_value = CommandResultFactory.build(
            stdout=get_memory_json(assigned_mb=2048, demand_mb=1500)
        )

        counters = await provider.get_memory("vm1")

        assert counters.assigned == 2048
        assert counters.demand == 1500
        assert "MemoryDemand" in script_of(runner)


class TestLifecycle:
    """Tests for start, stop and save."""

    async def test_start_vm(self, provider: HyperVProvider, runner: Mock) -> None:
        """Runs Start-VM against the server."""
        runner.run.return_value = CommandResultFactory.build(stdout="")

        await provider.start_vm("vm2")

        assert script_of(runner) == (
            "Start-VM -Name 'vm2' -ComputerName 'hv01' -ErrorAction Stop"
        )

    async def test_start_vm_failure(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Raises VmStartError when Start-VM fails."""
        runner.run.return_value = CommandResultFactory.build(
            exit_code=1, stdout="", stderr="Start-VM : not enough memory"
        )

        with pytest.raises(VmStartError, match="not enough memory"):
            await provider.start_vm("vm2")

    async def test_force_stop_turns_off(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Uses -TurnOff for a forced stop."""
        runner.run.return_value = CommandResultFactory.build(stdout="")

        await provider.stop_vm("vm2", force=True)

        assert "Stop-VM -Name 'vm2' -Force -TurnOff" in script_of(runner)

    async def test_save_vm_failure(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Raises DependencyUnavailable when Save-VM fails."""
        runner.run.return_value = CommandResultFactory.build(
            exit_code=1, stdout="", stderr="Save-VM : operation failed"
        )

        with pytest.raises(DependencyUnavailable, match="Unable to save VM vm1"):
            await provider.save_vm("vm1")


class TestQuoting:
    """Tests for quoting names inside PowerShell scripts."""

    async def test_doubles_single_quotes_in_vm_name(
        self, provider: HyperVProvider, runner: Mock
    ) -> None:
        """Keeps a quote in a VM name inside the string literal."""
        runner.run.return_value = CommandResultFactory.build(stdout="")

        await provider.save_vm("qa-o'neil")

        runner.run.assert_awaited_once_with(
            "pwsh",
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            "Save-VM -Name 'qa-o''neil' -ComputerName 'hv01' -ErrorAction Stop",
        )

    async def test_quotes_name_and_server_in_queries(
        self, runner: Mock
    ) -> None:
        """Quotes both the VM name and the server in Get-VM queries."""
        config = HyperVConfig(server="hv'01", powershell="pwsh")
        provider = HyperVProvider(config=config, runner=runner)
        runner.run.return_value = CommandResultFactory.build(
            stdout=get_vm_json(name="x'; Remove-VM *; '")
        )

        await provider.get_vm("x'; Remove-VM *; '")

        assert (
            "Get-VM -Name 'x''; Remove-VM *; ''' -ComputerName 'hv''01'"
            in script_of(runner)
        )
