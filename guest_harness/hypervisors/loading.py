"""Loading of hypervisor backends from entry points."""

from typing import Any

from guest_harness.hypervisors.manifest import HypervisorManifest
from guest_harness.plugins import load_manifest

ENTRY_POINT_GROUP = "guest_harness.hypervisors"


class HypervisorNotFoundError(Exception):
    """Raised when a hypervisor backend is not found."""


def load_hypervisor_manifest(key: str) -> HypervisorManifest[Any]:
    """Load a hypervisor manifest by key (e.g., "hyperv", "http").

    Raises:
        HypervisorNotFoundError: If no backend with the given key is found

    """
    manifest: HypervisorManifest[Any] = load_manifest(
        ENTRY_POINT_GROUP, key, "Hypervisor", HypervisorNotFoundError
    )
    return manifest
