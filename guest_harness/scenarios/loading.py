"""Loading of scenarios from entry points."""

from typing import Any

from guest_harness.plugins import load_manifest
from guest_harness.scenarios.manifest import ScenarioManifest

ENTRY_POINT_GROUP = "guest_harness.scenarios"


class ScenarioNotFoundError(Exception):
    """Raised when a scenario is not found."""


def load_scenario_manifest(key: str) -> ScenarioManifest[Any]:
    """Load a scenario manifest by key.

    Raises:
        ScenarioNotFoundError: If no scenario with the given key is found

    """
    manifest: ScenarioManifest[Any] = load_manifest(
        ENTRY_POINT_GROUP, key, "Scenario", ScenarioNotFoundError
    )
    return manifest
