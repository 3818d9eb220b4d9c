"""Adapter for the guest-side KVP client tool."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from guest_harness.errors import DependencyUnavailable
from guest_harness.runner import CommandRunner

log = logging.getLogger(__name__)

DEFAULT_KVP_TOOL = "./kvptool/kvp_client"

# kvp_client -l prints one "Key : <key>; Value : <value>" line per record
RECORD_PATTERN = re.compile(r"Key\s*:\s*(?P<key>.*?);\s*Value\s*:\s*(?P<value>.*)$")


@dataclass(frozen=True)
class KvpRecord:
    """A single key/value pair from a KVP pool."""

    key: str
    value: str


@dataclass(frozen=True, kw_only=True)
class PoolScan:
    """Pools in which a key/value pair was found, in scan order.

    ``pools_scanned`` is shorter than the requested range when the scan
    stopped early at a hit in a non-zero pool.
    """

    found_in: Sequence[int]
    pools_scanned: Sequence[int]

    @property
    def stray_pools(self) -> Sequence[int]:
        """Non-zero pools that hold the pair."""
        return [pool for pool in self.found_in if pool != 0]


def parse_kvp_listing(text: str) -> Sequence[KvpRecord]:
    """Extract key/value records from ``kvp_client -l`` output.

    Lines that are not records (pool headers, blank lines) are skipped.
    """
    records: list[KvpRecord] = []
    for line in text.splitlines():
        if match := RECORD_PATTERN.search(line.strip()):
            records.append(
                KvpRecord(
                    key=match.group("key").strip(),
                    value=match.group("value").strip(),
                )
            )
    return records


@dataclass(frozen=True, kw_only=True)
class KvpClient:
    """Lists KVP pools through the external client tool."""

    runner: CommandRunner
    executable: str = DEFAULT_KVP_TOOL

    async def list_pool(self, pool: int) -> Sequence[KvpRecord]:
        """Return all records of a numbered pool.

        Raises:
            DependencyUnavailable: If the tool reports an error

        """
        result = await self.runner.run(self.executable, "-l", "-p", str(pool))
        if not result.ok:
            raise DependencyUnavailable(
                f"KVP client failed for pool {pool} "
                f"(exit {result.exit_code}): {result.stderr.strip()}"
            )
        return parse_kvp_listing(result.stdout)


async def find_pools(
    client: KvpClient, key: str, value: str, pools: Sequence[int]
) -> PoolScan:
    """Scan pools in order for a key/value pair.

    Stops at the first hit in a non-zero pool, which already rules out a
    pool-0-only placement.
    """
    target = KvpRecord(key, value)
    found_in: list[int] = []
    scanned: list[int] = []

    for pool in pools:
        records = await client.list_pool(pool)
        scanned.append(pool)
        if target not in records:
            log.debug("Key %s not in pool %d", key, pool)
            continue
        found_in.append(pool)
        log.info("Key value pair %s=%s found in pool %d", key, value, pool)
        if pool != 0:
            break

    return PoolScan(found_in=found_in, pools_scanned=scanned)
