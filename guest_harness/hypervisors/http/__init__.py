"""HTTP management gateway backend module."""

from guest_harness.hypervisors.http.config import HttpGatewayConfig
from guest_harness.hypervisors.http.manifest import http_manifest
from guest_harness.hypervisors.http.provider import HttpGatewayProvider

__all__ = ["HttpGatewayConfig", "HttpGatewayProvider", "http_manifest"]
