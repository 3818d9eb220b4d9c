"""KVP pool placement scenario manifest."""

from guest_harness.scenarios.kvp_pool.config import KvpPoolConfig
from guest_harness.scenarios.kvp_pool.scenario import KvpPoolScenario
from guest_harness.scenarios.manifest import ScenarioManifest

kvp_pool_manifest = ScenarioManifest(
    config_cls=KvpPoolConfig,
    scenario_factory=KvpPoolScenario.create,
)
