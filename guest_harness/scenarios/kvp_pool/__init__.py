"""KVP pool placement scenario module."""

from guest_harness.scenarios.kvp_pool.config import KvpPoolConfig
from guest_harness.scenarios.kvp_pool.manifest import kvp_pool_manifest
from guest_harness.scenarios.kvp_pool.scenario import KvpPoolScenario

__all__ = ["KvpPoolConfig", "KvpPoolScenario", "kvp_pool_manifest"]
