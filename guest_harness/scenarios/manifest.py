"""Scenario manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel

from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.scenarios.base import TestCase
from guest_harness.state import StateReporter

type ScenarioFactory[ConfigT: BaseModel] = Callable[
    [ConfigT, StateReporter, HypervisorProvider | None], TestCase[ConfigT]
]


@dataclass(frozen=True, kw_only=True)
class ScenarioManifest[ConfigT: BaseModel]:
    """Manifest describing a scenario plugin.

    ``config_cls`` doubles as the list of parameters the scenario reads;
    its required fields are the required parameter keys.
    """

    config_cls: type[ConfigT]
    scenario_factory: ScenarioFactory[ConfigT]
    requires_hypervisor: bool = False
