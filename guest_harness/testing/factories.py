"""Test factories for generating test data."""

from polyfactory.factories import DataclassFactory
from polyfactory.factories.pydantic_factory import ModelFactory

from guest_harness.models.vm import MemoryCounters, VmInfo
from guest_harness.runner import CommandResult


class VmInfoFactory(ModelFactory[VmInfo]):
    """Factory for VmInfo."""

    state = "Running"
    heartbeat = None


class MemoryCountersFactory(ModelFactory[MemoryCounters]):
    """Factory for MemoryCounters with positive readings."""

    assigned = 1024
    demand = 870


class CommandResultFactory(DataclassFactory[CommandResult]):
    """Factory for a successful CommandResult."""

    command = ("kvp_client", "-l", "-p", "0")
    exit_code = 0
    stderr = ""
