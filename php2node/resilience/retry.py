#!/usr/bin/env python3
# CUI // SP-CTI
"""php2node Resilience: Retry with an explicit backoff policy.

A backoff policy is a plain function ``(attempt, base_delay) -> seconds``.
The conversion orchestrator uses ``linear_backoff`` (1s, 2s, 3s, ...) between
attempts of a single file; the policy is independent of the concurrency
primitive that runs the attempts.

Usage:
    from php2node.resilience.retry import call_with_retry

    result = call_with_retry(lambda: convert(path), max_attempts=3, sleep=fake_sleep)
"""

import logging
import time
from typing import Callable, Optional, Sequence, Type

logger = logging.getLogger("php2node.resilience.retry")


def linear_backoff(attempt: int, base_delay: float = 1.0) -> float:
    """Delay that grows linearly with the number of failed attempts.

    ``attempt`` is 1-based: the delay after the first failure is ``base_delay``.
    """
    return base_delay * max(attempt, 0)


def call_with_retry(
    func: Callable,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    delay_fn: Callable[[int, float], float] = linear_backoff,
    retryable_exceptions: Sequence[Type[Exception]] = (Exception,),
    on_retry: Optional[Callable] = None,
    sleep: Optional[Callable[[float], None]] = None,
):
    """Call ``func()`` up to ``max_attempts`` times in total.

    Args:
        func: Zero-argument callable to invoke.
        max_attempts: Total number of calls before giving up (>= 1).
        base_delay: Base delay handed to the backoff policy.
        delay_fn: Backoff policy mapping (attempt, base_delay) to seconds.
        retryable_exceptions: Exception types that trigger another attempt.
        on_retry: Optional callback(attempt, exc, delay) before each sleep.
        sleep: Sleep function; defaults to time.sleep.

    Returns:
        Whatever ``func`` returns on its first successful call.

    Raises:
        The last exception once ``max_attempts`` calls have failed.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    retryable = tuple(retryable_exceptions)
    do_sleep = sleep or time.sleep
    name = getattr(getattr(func, "func", func), "__name__", repr(func))

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except retryable as exc:
            if attempt >= max_attempts:
                raise
            delay = delay_fn(attempt, base_delay)
            logger.warning(
                "Attempt %d/%d for %s failed (%s: %s); waiting %.1fs",
                attempt,
                max_attempts,
                name,
                type(exc).__name__,
                exc,
                delay,
            )
            if on_retry:
                on_retry(attempt, exc, delay)
            do_sleep(delay)

