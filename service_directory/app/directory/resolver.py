"""
By-id employee lookup with a stale-cache fallback.
"""

from typing import Optional, TYPE_CHECKING

from shared.errors import EmployeeNotFoundError
from shared.logging import get_logger
from ..adapters.employee_api_client import EmployeeApiClient
from ..adapters.outcomes import Success, outcome_label
from ..caching.directory_cache import EmployeeDirectoryCache
from ..models import Employee

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class FallbackResolver:
    """Resolve an employee by ID, falling back to the cached directory.

    The direct lookup is not retried: when it fails for any
    reason (not found, rate limited, upstream error) the cached snapshot is
    scanned instead. The cache may be stale, so an employee created or
    deleted upstream since the last refresh can be reported wrongly.
    """

    def __init__(
        self,
        client: EmployeeApiClient,
        cache: EmployeeDirectoryCache,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.client = client
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("directory.resolver")

    async def resolve_by_id(self, employee_id: str) -> Employee:
        outcome = await self.client.fetch_by_id(employee_id)
        if isinstance(outcome, Success):
            self.logger.info("Fetched employee from upstream", employee_id=employee_id)
            return outcome.payload

        self.logger.warning(
            "Upstream lookup failed, falling back to cache",
            employee_id=employee_id,
            outcome=outcome_label(outcome)
        )
        snapshot = await self.cache.get_all()

        for employee in snapshot:
            if employee.id == employee_id:
                self._record("hit")
                self.logger.info(
                    "Served employee from cached directory",
                    employee_id=employee_id,
                    cached=len(snapshot)
                )
                return employee

        self._record("miss")
        self.logger.warning(
            "Employee not found in cached directory",
            employee_id=employee_id,
            cached=len(snapshot)
        )
        raise EmployeeNotFoundError(
            employee_id,
            details={"upstream_outcome": outcome_label(outcome)}
        )

    def _record(self, result: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("fallback_total", result=result)
