"""Hyper-V backend manifest."""

from guest_harness.hypervisors.hyperv.config import HyperVConfig
from guest_harness.hypervisors.hyperv.provider import HyperVProvider
from guest_harness.hypervisors.manifest import HypervisorManifest

hyperv_manifest = HypervisorManifest(
    config_cls=HyperVConfig,
    provider_factory=HyperVProvider.from_config,
)
