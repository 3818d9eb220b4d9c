"""Verify a key/value pair written by the guest lands in pool 0 only."""

import logging
from dataclasses import dataclass

from guest_harness.errors import AssertionFailure
from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.kvp import KvpClient, find_pools
from guest_harness.runner import CommandRunner
from guest_harness.scenarios.base import TestCase
from guest_harness.scenarios.kvp_pool.config import KvpPoolConfig
from guest_harness.state import StateReporter

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class KvpPoolScenario(TestCase[KvpPoolConfig]):
    """Checks that pool 0 holds the pair and no other pool does.

    Meant to run after the basic KVP test has added the pair.
    """

    client: KvpClient

    @classmethod
    def create(
        cls,
        config: KvpPoolConfig,
        reporter: StateReporter,
        hypervisor: HypervisorProvider | None = None,
    ) -> "KvpPoolScenario":
        """Build the scenario with a client for the configured tool."""
        runner = CommandRunner(cwd=config.root_dir)
        return cls(
            config=config,
            reporter=reporter,
            client=KvpClient(runner=runner, executable=config.kvp_tool),
        )

    async def prepare(self) -> None:
        """Record the covered test cases."""
        self.reporter.summary(f"Covers {self.config.tc_covered}")

    async def execute(self) -> str:
        """Scan every pool for the pair."""
        scan = await find_pools(
            self.client,
            self.config.key,
            self.config.value,
            range(self.config.pools),
        )

        if scan.stray_pools:
            pool = scan.stray_pools[0]
            raise AssertionFailure(f"key value pair is found in pool {pool}, so failed")

        if 0 not in scan.found_in:
            raise AssertionFailure(
                f"key value pair {self.config.key}={self.config.value} "
                "is not found in pool 0"
            )

        log.info("key value pair is found in pool 0 only")
        return "Verified that the added Key value is present in pool 0 only"
