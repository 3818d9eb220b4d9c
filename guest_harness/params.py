"""Parsing of semicolon-delimited test parameters into typed configuration."""

import logging
from collections.abc import Collection, Iterator, Mapping
from pathlib import Path

from pydantic import BaseModel, ValidationError

from guest_harness.errors import ConfigError

log = logging.getLogger(__name__)


class TestParameters(Mapping[str, str]):
    """Read-only parameter map with case-insensitive keys.

    Iteration yields keys in the spelling of their last occurrence.
    """

    __test__ = False

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        for key, value in (items or {}).items():
            self._items[key.casefold()] = (key, value)

    def __getitem__(self, key: str) -> str:
        return self._items[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._items

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"TestParameters({dict(self.items())!r})"


def parse_parameters(raw: str, required: Collection[str] = ()) -> TestParameters:
    """Parse a ``key=value;key=value`` blob.

    Args:
        raw: Parameter string supplied by the invoking automation
        required: Keys that must be present (case-insensitive)

    Returns:
        Parsed parameters with trimmed keys and values

    Raises:
        ConfigError: If the string is empty or required keys are missing

    """
    if not raw.strip():
        raise ConfigError("Test parameter string is empty")

    items: dict[str, str] = {}
    seen: dict[str, str] = {}
    for field in raw.split(";"):
        if not field.strip():
            continue
        key, sep, value = field.partition("=")
        key = key.strip()
        if not sep or not key:
            log.warning("Ignoring malformed parameter field: %r", field)
            continue
        # drop the previous spelling so the last occurrence wins
        items.pop(seen.get(key.casefold(), key), None)
        seen[key.casefold()] = key
        items[key] = value.strip()

    params = TestParameters(items)

    missing = [key for key in required if key not in params]
    if missing:
        raise ConfigError(
            f"Missing required test parameter(s): {', '.join(sorted(missing))}"
        )

    return params


def load_constants_file(path: Path) -> str:
    """Read a ``constants.sh`` style file and return it as a parameter blob.

    Each non-blank line is ``KEY=value``; ``#`` comments, an ``export``
    prefix and quotes around the value are stripped.
    """
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise ConfigError(f"Constants file not found: {path}") from exc

    fields: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").strip()
        key, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        fields.append(f"{key.strip()}={value}")

    return ";".join(fields)


def required_keys(config_cls: type[BaseModel]) -> frozenset[str]:
    """Return the parameter names a config model cannot do without."""
    return frozenset(
        info.alias or name
        for name, info in config_cls.model_fields.items()
        if info.is_required()
    )


def build_config[ConfigT: BaseModel](
    config_cls: type[ConfigT], params: Mapping[str, str]
) -> ConfigT:
    """Validate parameters into a typed configuration model.

    Parameter names are matched case-insensitively against field aliases.
    All problems are reported in a single ``ConfigError``.
    """
    lookup = params if isinstance(params, TestParameters) else TestParameters(params)

    data: dict[str, str] = {}
    for name, info in config_cls.model_fields.items():
        key = info.alias or name
        if key in lookup:
            data[key] = lookup[key]

    try:
        return config_cls.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigError(f"Invalid test parameters: {problems}") from exc
