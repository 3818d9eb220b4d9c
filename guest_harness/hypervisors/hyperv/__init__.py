"""Hyper-V backend module."""

from guest_harness.hypervisors.hyperv.config import HyperVConfig
from guest_harness.hypervisors.hyperv.manifest import hyperv_manifest
from guest_harness.hypervisors.hyperv.provider import HyperVProvider

__all__ = ["HyperVConfig", "HyperVProvider", "hyperv_manifest"]
