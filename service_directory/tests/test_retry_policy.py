"""
Unit tests for the rate-limit retry policy.
"""

import pytest
from unittest.mock import AsyncMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.metrics import MetricsCollector
from shared.retry import RetryConfig, _calculate_delay, retry_rate_limited
from shared.test_helpers import RecordingSleep
from service_directory.app.adapters.outcomes import (
    ClientError,
    NotFound,
    RateLimited,
    Success,
    is_rate_limited,
    mark_exhausted,
)


class TestRetryConfig:
    """Test cases for RetryConfig backoff schedule."""

    def test_default_schedule(self):
        """Test defaults: 4 attempts, 20s base, x1.5, capped at 60s."""
        config = RetryConfig()

        assert config.max_attempts == 4
        assert config.delays() == [20.0, 30.0, 45.0]

    def test_delay_capped_at_max(self):
        """Test delays never exceed the ceiling."""
        config = RetryConfig(max_attempts=6, base_delay=20.0, exponential_base=1.5, max_delay=60.0)

        assert config.delays() == [20.0, 30.0, 45.0, 60.0, 60.0]

    def test_jitter_stays_within_ten_percent(self):
        """Test jitter keeps the delay within 10% of the base schedule."""
        config = RetryConfig(base_delay=10.0, exponential_base=2.0, max_delay=100.0, jitter=True)

        for _ in range(50):
            delay = _calculate_delay(2, config)
            assert 18.0 <= delay <= 22.0

    def test_rejects_zero_attempts(self):
        """Test at least one attempt is required."""
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)


class TestRetryRateLimited:
    """Test cases for retry_rate_limited."""

    @pytest.fixture
    def sleep(self):
        return RecordingSleep()

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("directory")

    def _wrap(self, operation, sleep, metrics=None, config=None):
        return retry_rate_limited(
            operation,
            name="create",
            is_rate_limited=is_rate_limited,
            config=config or RetryConfig(),
            on_exhausted=mark_exhausted,
            metrics=metrics,
            sleep=sleep,
        )

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, sleep):
        """Test a successful call is returned without sleeping."""
        operation = AsyncMock(return_value=Success("ok"))

        result = await self._wrap(operation, sleep)()

        assert result == Success("ok")
        operation.assert_awaited_once()
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_arguments_forwarded(self, sleep):
        """Test wrapped callable passes its arguments through on every attempt."""
        operation = AsyncMock(side_effect=[RateLimited(), Success("created")])

        result = await self._wrap(operation, sleep)("payload", flag=True)

        assert result == Success("created")
        assert operation.await_count == 2
        for call in operation.await_args_list:
            assert call.args == ("payload",)
            assert call.kwargs == {"flag": True}

    @pytest.mark.asyncio
    async def test_recovers_after_rate_limit(self, sleep):
        """Test retrying until the upstream stops rate limiting."""
        operation = AsyncMock(side_effect=[RateLimited(), RateLimited(), Success("ok")])

        result = await self._wrap(operation, sleep)()

        assert result == Success("ok")
        assert operation.await_count == 3
        assert sleep.delays == [20.0, 30.0]

    @pytest.mark.asyncio
    async def test_exhaustion_makes_four_attempts(self, sleep, metrics):
        """Test persistent rate limiting stops after 4 attempts with the backoff schedule."""
        operation = AsyncMock(return_value=RateLimited())

        result = await self._wrap(operation, sleep, metrics=metrics)()

        assert operation.await_count == 4
        assert sleep.delays == [20.0, 30.0, 45.0]
        assert result == RateLimited(attempts=4, exhausted=True)
        assert metrics.sample("retry_attempts_total", operation="create") == 4
        assert metrics.sample("retry_exhausted_total", operation="create") == 1

    @pytest.mark.parametrize("outcome", [NotFound(), ClientError(500), ClientError(400)])
    @pytest.mark.asyncio
    async def test_other_failures_not_retried(self, sleep, outcome):
        """Test non-rate-limit failures are returned unchanged after one attempt."""
        operation = AsyncMock(return_value=outcome)

        result = await self._wrap(operation, sleep)()

        assert result is outcome
        operation.assert_awaited_once()
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_failure_after_rate_limit_stops_retrying(self, sleep):
        """Test a different failure mid-sequence ends the retry loop."""
        operation = AsyncMock(side_effect=[RateLimited(), ClientError(503), Success("never")])

        result = await self._wrap(operation, sleep)()

        assert result == ClientError(503)
        assert operation.await_count == 2
        assert sleep.delays == [20.0]

    @pytest.mark.asyncio
    async def test_without_exhaustion_hook_returns_last_outcome(self, sleep):
        """Test the last outcome is returned as-is when no hook is given."""
        operation = AsyncMock(return_value=RateLimited())
        wrapped = retry_rate_limited(
            operation,
            name="fetch_all",
            is_rate_limited=is_rate_limited,
            config=RetryConfig(max_attempts=2, base_delay=1.0),
            sleep=sleep,
        )

        result = await wrapped()

        assert result == RateLimited(attempts=1, exhausted=False)
        assert sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self, sleep):
        """Test exceptions raised by the operation are not swallowed."""
        operation = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await self._wrap(operation, sleep)()
        operation.assert_awaited_once()
