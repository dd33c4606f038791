"""
Unit tests for the by-id fallback resolver.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import EmployeeNotFoundError, RateLimitError
from shared.metrics import MetricsCollector
from shared.test_helpers import TestDataFactory
from service_directory.app.adapters.outcomes import (
    ClientError,
    NotFound,
    RateLimited,
    Success,
    TransportError,
)
from service_directory.app.directory.resolver import FallbackResolver
from service_directory.app.models import Employee


class TestFallbackResolver:
    """Test cases for FallbackResolver."""

    @pytest.fixture
    def cached_employee(self):
        return Employee.from_upstream(TestDataFactory.create_employee_payload(name="Cached Person"))

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.fetch_by_id = AsyncMock()
        return client

    @pytest.fixture
    def cache(self, cached_employee):
        cache = MagicMock()
        other = Employee.from_upstream(TestDataFactory.create_employee_payload(name="Someone Else"))
        cache.get_all = AsyncMock(return_value=(other, cached_employee))
        return cache

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("directory")

    @pytest.fixture
    def resolver(self, client, cache, metrics):
        return FallbackResolver(client, cache, metrics=metrics)

    @pytest.mark.asyncio
    async def test_direct_success_skips_cache(self, resolver, client, cache):
        """Test a successful upstream lookup never touches the cache."""
        fresh = Employee.from_upstream(TestDataFactory.create_employee_payload(name="Fresh Person"))
        client.fetch_by_id.return_value = Success(fresh)

        result = await resolver.resolve_by_id(fresh.id)

        assert result == fresh
        client.fetch_by_id.assert_awaited_once_with(fresh.id)
        cache.get_all.assert_not_awaited()

    @pytest.mark.parametrize(
        "failure",
        [NotFound(), RateLimited(), ClientError(500), ClientError(400), TransportError("timeout")],
    )
    @pytest.mark.asyncio
    async def test_any_failure_falls_back_to_cache(self, resolver, client, cache, cached_employee, metrics, failure):
        """Test every kind of upstream failure is recovered from the cached directory."""
        client.fetch_by_id.return_value = failure

        result = await resolver.resolve_by_id(cached_employee.id)

        assert result == cached_employee
        client.fetch_by_id.assert_awaited_once()
        cache.get_all.assert_awaited_once()
        assert metrics.sample("fallback_total", result="hit") == 1

    @pytest.mark.asyncio
    async def test_absent_everywhere_is_not_found(self, resolver, client, metrics):
        """Test an employee missing upstream and from the cache is not found."""
        client.fetch_by_id.return_value = NotFound()

        with pytest.raises(EmployeeNotFoundError) as exc_info:
            await resolver.resolve_by_id("11111111-1111-1111-1111-111111111111")

        assert exc_info.value.details["employee_id"] == "11111111-1111-1111-1111-111111111111"
        assert exc_info.value.details["upstream_outcome"] == "not_found"
        assert metrics.sample("fallback_total", result="miss") == 1

    @pytest.mark.asyncio
    async def test_direct_lookup_not_retried(self, resolver, client, cache, cached_employee):
        """Test a rate-limited direct lookup goes straight to the cache."""
        client.fetch_by_id.return_value = RateLimited()

        await resolver.resolve_by_id(cached_employee.id)

        assert client.fetch_by_id.await_count == 1

    @pytest.mark.asyncio
    async def test_cache_errors_propagate(self, resolver, client, cache):
        """Test a cache refill failure is reported as-is."""
        client.fetch_by_id.return_value = RateLimited()
        cache.get_all.side_effect = RateLimitError(details={"exhausted": True})

        with pytest.raises(RateLimitError):
            await resolver.resolve_by_id("any-id")
