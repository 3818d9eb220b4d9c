"""CLI entry point for guest integration test scenarios."""

import argparse
import asyncio
import json
import logging
import sys
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from guest_harness.errors import ConfigError
from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.hypervisors.loading import (
    HypervisorNotFoundError,
    load_hypervisor_manifest,
)
from guest_harness.models.result import ScenarioResult
from guest_harness.params import (
    build_config,
    load_constants_file,
    parse_parameters,
    required_keys,
)
from guest_harness.scenarios.loading import (
    ScenarioNotFoundError,
    load_scenario_manifest,
)
from guest_harness.state import StateReporter, TestState

DEFAULT_STATE_FILE = Path("~/state.txt")
DEFAULT_SUMMARY_LOG = Path("~/summary.log")

STATUS_SYMBOLS = {
    TestState.COMPLETED: "✅",
    TestState.FAILED: "❌",
    TestState.ABORTED: "❗",
    TestState.RUNNING: "⏱️",
}


def log_result_summary(log: logging.Logger, result: ScenarioResult) -> None:
    """Log a formatted summary of a scenario run."""
    log.info("=" * 80)
    log.info("Test Result Summary:")
    log.info("=" * 80)

    symbol = STATUS_SYMBOLS.get(result.state, "?")
    log.info(
        "%s %s: %s (%.2fs)",
        symbol,
        result.scenario,
        result.state.value,
        result.duration,
    )
    if result.message:
        log.info("  Message: %s", result.message)


def format_output(result: ScenarioResult) -> dict[str, Any]:
    """Format a scenario result for JSON output."""
    return {
        "scenario": result.scenario,
        "state": result.state.value,
        "passed": result.passed,
        "duration": result.duration,
        "message": result.message,
    }


@asynccontextmanager
async def open_hypervisor(
    key: str | None, config_json: str, server: str | None
) -> AsyncGenerator[HypervisorProvider | None, None]:
    """Open the selected hypervisor backend, or yield None without one.

    ``server`` fills the backend's ``server`` setting unless the JSON
    configuration sets it.
    """
    if key is None:
        yield None
        return

    manifest = load_hypervisor_manifest(key)
    config_dict = json.loads(config_json)
    if not isinstance(config_dict, dict):
        raise ConfigError(
            f"Hypervisor configuration must be a JSON object, got {config_json!r}"
        )
    if server and "server" in manifest.config_cls.model_fields:
        config_dict.setdefault("server", server)
    config = manifest.config_cls(**config_dict)

    async with manifest.provider_factory(config) as provider:
        yield provider


async def run(
    scenario_key: str,
    raw_params: str | None,
    state_file: Path,
    summary_log: Path,
    hypervisor_key: str | None = None,
    hypervisor_config_json: str = "{}",
    constants_file: Path | None = None,
) -> int:
    """Run one scenario and return the process exit code."""
    log = logging.getLogger("guest_harness")
    started = time.monotonic()

    reporter = StateReporter(state_file.expanduser(), summary_log.expanduser())
    reporter.start()

    try:
        passed = await _run_scenario(
            log,
            reporter,
            scenario_key,
            raw_params,
            hypervisor_key,
            hypervisor_config_json,
            constants_file,
        )
    finally:
        if reporter.state is TestState.RUNNING:
            reporter.report_aborted("Run ended without a verdict")

    state = reporter.state or TestState.ABORTED
    result = ScenarioResult(
        scenario=scenario_key,
        state=state,
        duration=time.monotonic() - started,
        message=f"Summary log: {reporter.summary_log}",
    )
    log_result_summary(log, result)
    print(json.dumps(format_output(result), indent=2))

    return 0 if passed else 1


async def _run_scenario(
    log: logging.Logger,
    reporter: StateReporter,
    scenario_key: str,
    raw_params: str | None,
    hypervisor_key: str | None,
    hypervisor_config_json: str,
    constants_file: Path | None,
) -> bool:
    """Validate parameters, open collaborators and run the scenario."""
    try:
        log.info("Loading scenario: %s", scenario_key)
        manifest = load_scenario_manifest(scenario_key)

        if raw_params is None:
            if constants_file is None:
                raise ConfigError("Either --params or --constants-file is required")
            raw_params = load_constants_file(constants_file.expanduser())

        params = parse_parameters(raw_params, required_keys(manifest.config_cls))
        config = build_config(manifest.config_cls, params)

        if manifest.requires_hypervisor and hypervisor_key is None:
            raise ConfigError(f"Scenario '{scenario_key}' requires --hypervisor")
    except (ConfigError, ScenarioNotFoundError) as exc:
        reporter.report_aborted(str(exc))
        return False

    server = params.get("hvServer")
    try:
        async with open_hypervisor(
            hypervisor_key, hypervisor_config_json, server
        ) as hypervisor:
            scenario = manifest.scenario_factory(config, reporter, hypervisor)
            log.info("Running scenario %s", scenario_key)
            return await scenario.run()
    except (
        ConfigError,
        HypervisorNotFoundError,
        ValidationError,
        json.JSONDecodeError,
    ) as exc:
        reporter.report_aborted(f"Invalid hypervisor configuration: {exc}")
        return False


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run a guest integration test scenario"
    )
    parser.add_argument(
        "--scenario",
        required=True,
        help="Scenario key (kvp-pool0, dm-save-restore)",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--params",
        help="Semicolon-delimited key=value test parameters",
    )
    source.add_argument(
        "--constants-file",
        type=Path,
        help="constants.sh style file with one KEY=value per line",
    )
    parser.add_argument(
        "--hypervisor",
        default=None,
        help="Hypervisor backend key (hyperv, http)",
    )
    parser.add_argument(
        "--hypervisor-config",
        default="{}",
        help="JSON configuration for the hypervisor backend",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=DEFAULT_STATE_FILE,
        help="File receiving the test state marker",
    )
    parser.add_argument(
        "--summary-log",
        type=Path,
        default=DEFAULT_SUMMARY_LOG,
        help="Human-readable summary log, reset on every run",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            scenario_key=args.scenario,
            raw_params=args.params,
            state_file=args.state_file,
            summary_log=args.summary_log,
            hypervisor_key=args.hypervisor,
            hypervisor_config_json=args.hypervisor_config,
            constants_file=args.constants_file,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
