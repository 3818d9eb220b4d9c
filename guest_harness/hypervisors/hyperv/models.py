"""Pydantic models for Hyper-V cmdlet output."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from guest_harness.models.vm import VmState, known_state


class VmRecord(BaseModel):
    """A VM as serialized by ``Get-VM | ConvertTo-Json``."""

    name: str = Field(..., alias="Name")
    state: VmState = Field(..., alias="State")
    heartbeat: str | None = Field(default=None, alias="Heartbeat")

    @field_validator("state", mode="before")
    @classmethod
    def collapse_state(cls, value: Any) -> str:
        """Map states the harness does not distinguish to Other."""
        return known_state(value)


class MemoryRecord(BaseModel):
    """Memory counters in megabytes as selected from ``Get-VM``."""

    assigned: int = Field(..., alias="MemoryAssignedMB")
    demand: int = Field(..., alias="MemoryDemandMB")
