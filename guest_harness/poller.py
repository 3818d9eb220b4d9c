"""Bounded polling of a numeric probe."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

log = logging.getLogger(__name__)

type SampleFn = Callable[[], Awaitable[float]]
type Predicate = Callable[[float], bool]


@dataclass(frozen=True, kw_only=True)
class PollResult:
    """Last sampled value and how the poll ended."""

    value: float
    elapsed: float
    timed_out: bool

    @property
    def succeeded(self) -> bool:
        """Whether the predicate held before the budget ran out."""
        return not self.timed_out


async def poll(
    sample_fn: SampleFn,
    predicate: Predicate,
    interval: float,
    timeout: float,
) -> PollResult:
    """Sample until the predicate holds or the time budget is spent.

    Args:
        sample_fn: Zero-argument probe returning a number
        predicate: Condition the sampled value must satisfy
        interval: Seconds to sleep between samples
        timeout: Total seconds to spend sleeping before giving up

    Returns:
        Poll result; ``timed_out`` is set when the predicate never held

    The probe is always sampled at least once, even when ``timeout`` is
    smaller than ``interval``.

    """
    if interval <= 0:
        raise ValueError(f"Poll interval must be positive, got {interval}")
    if timeout < 0:
        raise ValueError(f"Poll timeout must not be negative, got {timeout}")

    loop = asyncio.get_running_loop()
    started = loop.time()
    remaining = timeout
    samples = 0

    while True:
        value = await sample_fn()
        samples += 1

        if predicate(value):
            return PollResult(
                value=value, elapsed=loop.time() - started, timed_out=False
            )

        if remaining <= 0:
            log.debug("Poll gave up after %d sample(s), last value=%s", samples, value)
            return PollResult(
                value=value, elapsed=loop.time() - started, timed_out=True
            )

        delay = min(interval, remaining)
        remaining -= delay
        await asyncio.sleep(delay)
