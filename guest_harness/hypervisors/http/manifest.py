"""HTTP management gateway backend manifest."""

from guest_harness.hypervisors.http.config import HttpGatewayConfig
from guest_harness.hypervisors.http.provider import HttpGatewayProvider
from guest_harness.hypervisors.manifest import HypervisorManifest

http_manifest = HypervisorManifest(
    config_cls=HttpGatewayConfig,
    provider_factory=HttpGatewayProvider.from_config,
)
