"""
Retry mechanism for rate-limited upstream operations.

Upstream calls return tagged outcomes instead of raising, so the policy
here classifies each outcome with a predicate rather than catching
exceptions. Only outcomes the predicate flags are retried; everything else
is handed back to the caller untouched.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, List, Optional, TypeVar, TYPE_CHECKING

from shared.logging import get_logger, upstream_operation

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_attempts: int = 4,
                 base_delay: float = 20.0,
                 max_delay: float = 60.0,
                 exponential_base: float = 1.5,
                 jitter: bool = False):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    def delays(self) -> List[float]:
        """Backoff schedule between attempts, ignoring jitter."""
        return [
            min(self.base_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)
            for attempt in range(1, self.max_attempts)
        ]


def _calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay after a failed attempt (1-based)."""
    delay = config.base_delay * (config.exponential_base ** (attempt - 1))

    # Apply max delay cap
    delay = min(delay, config.max_delay)

    if config.jitter:
        jitter_amount = delay * 0.1  # 10% jitter
        delay += random.uniform(-jitter_amount, jitter_amount)

    return max(0.0, delay)


def retry_rate_limited(
    operation: Callable[..., Awaitable[T]],
    *,
    name: str,
    is_rate_limited: Callable[[T], bool],
    config: Optional[RetryConfig] = None,
    on_exhausted: Optional[Callable[[T, int], T]] = None,
    metrics: Optional["MetricsCollector"] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Callable[..., Awaitable[T]]:
    """Wrap an async operation with bounded exponential backoff.

    The wrapped callable re-invokes ``operation`` while ``is_rate_limited``
    holds for its result, sleeping between attempts. Once the attempt
    budget is spent the last outcome is passed through ``on_exhausted``
    (when given) together with the number of attempts made, so callers can
    tell a terminal rate-limit apart from a single one.
    """

    if config is None:
        config = RetryConfig()

    logger = get_logger(f"retry.{name}")

    async def wrapper(*args, **kwargs) -> T:
        with upstream_operation(name):
            return await _attempt(*args, **kwargs)

    async def _attempt(*args, **kwargs) -> T:
        for attempt in range(1, config.max_attempts + 1):
            logger.debug(
                "Retry attempt",
                attempt=attempt,
                max_attempts=config.max_attempts,
                operation=name
            )
            if metrics is not None:
                metrics.increment_counter("retry_attempts_total", operation=name)

            outcome = await operation(*args, **kwargs)

            if not is_rate_limited(outcome):
                if attempt > 1:
                    logger.info("Retry succeeded", attempt=attempt, operation=name)
                return outcome

            if attempt == config.max_attempts:
                logger.error(
                    "All retry attempts exhausted - rate limit still active",
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    operation=name
                )
                if metrics is not None:
                    metrics.increment_counter("retry_exhausted_total", operation=name)
                if on_exhausted is not None:
                    return on_exhausted(outcome, attempt)
                return outcome

            delay = _calculate_delay(attempt, config)
            logger.warning(
                "Rate limited, waiting before next attempt",
                attempt=attempt,
                delay=delay,
                operation=name
            )
            await sleep(delay)

        # max_attempts >= 1 guarantees the loop returns
        raise AssertionError("unreachable")

    wrapper.__name__ = f"retry_{name}"
    wrapper.__qualname__ = wrapper.__name__
    return wrapper
