"""Hypervisor manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from guest_harness.hypervisors.base import HypervisorProvider


@dataclass(frozen=True, kw_only=True)
class HypervisorManifest[ConfigT: BaseModel]:
    """Manifest describing a hypervisor backend.

    Holds the configuration class and the factory that opens a provider,
    so backends are only imported when their key is selected.
    """

    config_cls: type[ConfigT]
    provider_factory: Callable[
        [ConfigT], AbstractAsyncContextManager[HypervisorProvider]
    ]
