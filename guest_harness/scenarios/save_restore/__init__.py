"""Dynamic Memory save/restore scenario module."""

from guest_harness.scenarios.save_restore.config import SaveRestoreConfig
from guest_harness.scenarios.save_restore.manifest import save_restore_manifest
from guest_harness.scenarios.save_restore.scenario import SaveRestoreScenario

__all__ = ["SaveRestoreConfig", "SaveRestoreScenario", "save_restore_manifest"]
