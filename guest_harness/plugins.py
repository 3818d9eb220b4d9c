"""Loading of plugin manifests from entry points."""

from importlib.metadata import entry_points
from typing import Any


def load_manifest(
    group: str, key: str, kind: str, error_cls: type[Exception]
) -> Any:
    """Load the manifest registered under a key in an entry point group.

    Args:
        group: Entry point group, e.g. "guest_harness.scenarios"
        key: The key as registered in pyproject.toml
        kind: Plugin kind used in the error message, e.g. "Scenario"
        error_cls: Exception raised when the key is not registered

    Returns:
        The loaded manifest object

    """
    entries = entry_points(group=group)

    for entry in entries:
        if entry.name == key:
            return entry.load()

    available = sorted(e.name for e in entries)
    raise error_cls(
        f"{kind} '{key}' not found. Available {kind.lower()}s: {available}"
    )
