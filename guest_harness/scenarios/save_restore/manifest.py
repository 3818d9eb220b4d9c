"""Dynamic Memory save/restore scenario manifest."""

from guest_harness.scenarios.manifest import ScenarioManifest
from guest_harness.scenarios.save_restore.config import SaveRestoreConfig
from guest_harness.scenarios.save_restore.scenario import SaveRestoreScenario

save_restore_manifest = ScenarioManifest(
    config_cls=SaveRestoreConfig,
    scenario_factory=SaveRestoreScenario.create,
    requires_hypervisor=True,
)
