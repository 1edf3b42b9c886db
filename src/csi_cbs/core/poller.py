"""Bounded polling for asynchronous CBS operations.

CBS applies create/attach/detach asynchronously. poll_until() re-reads
disk state at a fixed interval until a predicate holds or the deadline
passes.

Fetch errors are transient: they are logged and retried, and never
shorten the deadline. The clock is injectable so tests can advance time
without real delay.

Usage:
    from csi_cbs.core.poller import poll_until

    disk = await poll_until(
        lambda: gateway.describe(disk_id),
        lambda d: d.is_attached,
        interval=5.0,
        timeout=120.0,
    )
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from csi_cbs.logging_schema import Component, ErrorClass, LogEvent
from csi_cbs.metrics.collector import CSI_POLL_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PollTimeoutError(Exception):
    """Raised when the predicate does not hold before the deadline."""

    def __init__(self, timeout: float, attempts: int) -> None:
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(f"condition not met within {timeout:.1f}s ({attempts} attempts)")


class Clock(Protocol):
    """Time source for poll loops."""

    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Wall clock backed by time.monotonic and asyncio.sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


async def poll_until(
    fetch: Callable[[], Awaitable[T | None]],
    predicate: Callable[[T], bool],
    *,
    interval: float,
    timeout: float,
    clock: Clock | None = None,
    operation: str = "unknown",
) -> T:
    """Poll fetch() until predicate(result) holds.

    The first fetch happens after one interval. Sleeps are capped at the
    remaining time so the loop gives up exactly at the deadline.

    Args:
        fetch: Factory returning the current snapshot (None = not visible yet)
        predicate: Condition on the snapshot that ends the loop
        interval: Seconds between fetches
        timeout: Seconds from loop start until giving up
        clock: Time source (default: SystemClock)
        operation: Operation name for logs and metrics

    Returns:
        The first snapshot satisfying predicate

    Raises:
        PollTimeoutError: If the deadline passes first
    """
    clock = clock or SystemClock()
    deadline = clock.monotonic() + timeout
    attempts = 0

    while True:
        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            break
        await clock.sleep(min(interval, remaining))

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            break

        attempts += 1
        CSI_POLL_ATTEMPTS.labels(operation=operation).inc()
        try:
            snapshot = await asyncio.wait_for(fetch(), timeout=remaining)
        except Exception as exc:
            logger.debug(
                "Poll fetch failed, retrying: %s",
                exc,
                extra={
                    "event": LogEvent.POLL_RETRY,
                    "component": Component.POLLER,
                    "operation": operation,
                    "attempt": attempts,
                    "error_class": ErrorClass.TRANSIENT,
                },
            )
            continue

        if snapshot is not None and predicate(snapshot):
            return snapshot

    logger.warning(
        "Poll deadline reached",
        extra={
            "event": LogEvent.POLL_TIMEOUT,
            "component": Component.POLLER,
            "operation": operation,
            "attempts": attempts,
            "timeout_s": timeout,
            "error_class": ErrorClass.TIMEOUT,
        },
    )
    raise PollTimeoutError(timeout, attempts)
