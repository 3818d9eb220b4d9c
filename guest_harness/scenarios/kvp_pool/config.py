"""Parameters of the KVP pool placement scenario."""

from pydantic import DirectoryPath, Field

from guest_harness.kvp import DEFAULT_KVP_TOOL
from guest_harness.models.base import Model


class KvpPoolConfig(Model):
    """Parameters read from the test parameter blob."""

    tc_covered: str = Field(
        ..., alias="TC_COVERED", description="Covered test case IDs"
    )
    key: str = Field(..., alias="Key", description="Key expected in pool 0")
    value: str = Field(..., alias="Value", description="Value stored under the key")
    kvp_tool: str = Field(
        default=DEFAULT_KVP_TOOL, alias="kvpTool", description="KVP client executable"
    )
    pools: int = Field(default=5, alias="pools", ge=1, description="Pools to scan")
    root_dir: DirectoryPath | None = Field(
        default=None, alias="rootDir", description="Directory the tool runs in"
    )
