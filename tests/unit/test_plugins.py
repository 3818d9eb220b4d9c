"""Tests for plugin manifest loading."""

import pytest

from guest_harness.plugins import load_manifest
from guest_harness.scenarios.kvp_pool import kvp_pool_manifest


class PluginMissingError(Exception):
    """Error raised by the tests for unknown keys."""


def test_load_manifest_returns_registered_object() -> None:
    """Loads the object registered under the key."""
    manifest = load_manifest(
        "guest_harness.scenarios", "kvp-pool0", "Scenario", PluginMissingError
    )

    assert manifest is kvp_pool_manifest


def test_load_manifest_lists_available_keys() -> None:
    """Raises the given error listing the registered keys."""
    with pytest.raises(PluginMissingError) as exc_info:
        load_manifest(
            "guest_harness.hypervisors", "vmware", "Hypervisor", PluginMissingError
        )

    message = str(exc_info.value)
    assert message.startswith("Hypervisor 'vmware' not found.")
    assert "Available hypervisors: ['http', 'hyperv']" in message


def test_load_manifest_with_empty_group() -> None:
    """Reports an empty list for a group without registrations."""
    with pytest.raises(PluginMissingError, match=r"Available widgets: \[\]"):
        load_manifest("guest_harness.nothing", "x", "Widget", PluginMissingError)
