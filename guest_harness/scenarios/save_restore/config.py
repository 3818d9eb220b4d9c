"""Parameters of the Dynamic Memory save/restore scenario."""

from pydantic import Field

from guest_harness.models.base import Model


class SaveRestoreConfig(Model):
    """Parameters read from the test parameter blob.

    Durations are in seconds.
    """

    vm_name: str = Field(..., alias="vmName", description="VM under test")
    vm2_name: str = Field(..., alias="vm2Name", description="Dependent VM")
    hv_server: str = Field(..., alias="hvServer", description="Virtualization host")
    tc_covered: str | None = Field(default=None, alias="TC_COVERED")
    tries: int = Field(default=3, alias="tries", ge=1)
    start_retry_delay: float = Field(default=20, alias="startRetryDelay", ge=0)
    start_timeout: float = Field(default=120, alias="startTimeout", gt=0)
    settle_delay: float = Field(default=30, alias="settleDelay", ge=0)
    memory_window: float = Field(default=60, alias="memoryWindow", ge=0)
    poll_interval: float = Field(default=5, alias="pollInterval", gt=0)
    rounds: int = Field(default=2, alias="rounds", ge=1)
