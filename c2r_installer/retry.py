# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/retry.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Bounded retry combinator shared by every polling loop

"""
Bounded polling.

retry_until() keeps all timeout arithmetic in one place. It never sleeps past
the deadline, so a call returns within timeout + interval even when the
predicate never holds.
"""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RetryOutcome:
    """Result of a bounded retry."""
    succeeded: bool
    attempts: int
    elapsed: float

    @property
    def timed_out(self) -> bool:
        return not self.succeeded


def retry_until(
    predicate: Callable[[], bool],
    interval: float,
    timeout: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome:
    """
    Evaluate predicate until it returns True or timeout elapses.

    Args:
        predicate: Zero-argument check, evaluated at least once
        interval: Seconds between evaluations (must be positive)
        timeout: Overall budget in seconds (must not be negative)
        clock: Monotonic clock (injectable for tests)
        sleep: Sleep function (injectable for tests)

    Returns:
        RetryOutcome describing whether the predicate held

    Raises:
        ValueError: If interval or timeout is out of range
    """
    if interval <= 0:
        raise ValueError(f"Retry interval must be positive: {interval}")
    if timeout < 0:
        raise ValueError(f"Retry timeout must not be negative: {timeout}")

    start = clock()
    attempts = 0

    while True:
        attempts += 1
        if predicate():
            return RetryOutcome(True, attempts, clock() - start)

        elapsed = clock() - start
        remaining = timeout - elapsed
        if remaining <= 0:
            return RetryOutcome(False, attempts, elapsed)

        sleep(min(interval, remaining))
