"""Pydantic models for management gateway responses."""

from typing import Any

from pydantic import BaseModel, field_validator

from guest_harness.models.vm import VmState, known_state


class VmPayload(BaseModel):
    """A VM as returned by ``GET hosts/:server/vms/:name``."""

    name: str
    state: VmState
    heartbeat: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def collapse_state(cls, value: Any) -> str:
        """Map states the harness does not distinguish to Other."""
        return known_state(value)


class MemoryPayload(BaseModel):
    """Memory counters as returned by ``GET hosts/:server/vms/:name/memory``."""

    assigned_mb: int
    demand_mb: int
