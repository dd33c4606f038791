"""
Employee directory operations exposed to the API layer.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TYPE_CHECKING

from shared.errors import EmployeeNotFoundError, InvalidInputError
from shared.logging import get_logger
from shared.retry import RetryConfig, retry_rate_limited
from ..adapters.employee_api_client import EmployeeApiClient
from ..adapters.outcomes import NotFound, is_rate_limited, mark_exhausted
from ..caching.directory_cache import EmployeeDirectoryCache
from ..models import (
    CreateEmployeeInput,
    DirectorySnapshot,
    Employee,
    MAX_EMPLOYEE_AGE,
    MIN_EMPLOYEE_AGE,
)
from . import queries
from .resolver import FallbackResolver

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class EmployeeDirectoryService:
    """Resilient facade over the upstream employee API.

    Reads go through the directory cache (by-id reads try upstream first
    and fall back to it). Writes are retried on rate limiting and
    invalidate the cache once upstream accepts them.
    """

    def __init__(
        self,
        client: EmployeeApiClient,
        *,
        retry_config: Optional[RetryConfig] = None,
        metrics: Optional["MetricsCollector"] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.metrics = metrics
        self.retry_config = retry_config or RetryConfig()
        self.logger = get_logger("directory.service")

        self._fetch_all = self._retrying(client.fetch_all, "fetch_all", sleep)
        self._create = self._retrying(client.create, "create", sleep)
        self._delete_by_name = self._retrying(client.delete_by_name, "delete_by_name", sleep)

        self.cache = EmployeeDirectoryCache(self._fetch_all, metrics=metrics)
        self.resolver = FallbackResolver(client, self.cache, metrics=metrics)

    def _retrying(self, operation, name: str, sleep):
        return retry_rate_limited(
            operation,
            name=name,
            is_rate_limited=is_rate_limited,
            config=self.retry_config,
            on_exhausted=mark_exhausted,
            metrics=self.metrics,
            sleep=sleep,
        )

    async def get_all(self) -> DirectorySnapshot:
        return await self.cache.get_all()

    async def search_by_name(self, term: str) -> List[Employee]:
        self.logger.info("Searching employees by name", term=term)
        matches = queries.search_by_name(await self.cache.get_all(), term)
        self.logger.info("Employee search complete", term=term, matches=len(matches))
        return matches

    async def get_by_id(self, employee_id: str) -> Employee:
        self.logger.info("Fetching employee by ID", employee_id=employee_id)
        return await self.resolver.resolve_by_id(employee_id)

    async def get_highest_salary(self) -> int:
        return queries.highest_salary(await self.cache.get_all())

    async def get_top_ten_names(self) -> List[str]:
        return queries.top_earner_names(await self.cache.get_all())

    async def create(self, employee_input: CreateEmployeeInput) -> Employee:
        """Validate locally, create upstream, then invalidate the cache."""
        self.logger.info("Attempting to create employee", name=employee_input.name)
        validate_create_input(employee_input)

        outcome = await self._create(employee_input)
        employee = outcome.unwrap("create")

        self.logger.info("Successfully created employee", employee_id=employee.id)
        self.cache.invalidate()
        return employee

    async def delete_by_id(self, employee_id: str) -> str:
        """Delete an employee by ID and return the deleted name.

        The upstream deletes by name, so the current name is looked up
        directly (never from the cache) first.
        """
        self.logger.info("Attempting to delete employee", employee_id=employee_id)

        lookup = await self.client.fetch_by_id(employee_id)
        if isinstance(lookup, NotFound):
            self.logger.warning("Employee does not exist", employee_id=employee_id)
            raise EmployeeNotFoundError(employee_id, message="Employee does not exist")
        employee = lookup.unwrap("fetch_by_id")

        outcome = await self._delete_by_name(employee.name)
        outcome.unwrap("delete_by_name")

        self.logger.info("Successfully deleted employee", employee_id=employee_id, name=employee.name)
        self.cache.invalidate()
        return employee.name


def validate_create_input(employee_input: CreateEmployeeInput) -> None:
    """Raise ``InvalidInputError`` unless the request may be sent upstream."""
    errors = {}

    if not employee_input.name or not employee_input.name.strip():
        errors["name"] = "must not be blank"
    if not employee_input.title or not employee_input.title.strip():
        errors["title"] = "must not be blank"
    if employee_input.salary is None or employee_input.salary <= 0:
        errors["salary"] = "must be a positive integer"
    if employee_input.age is None:
        errors["age"] = "is required"
    elif employee_input.age < MIN_EMPLOYEE_AGE:
        errors["age"] = f"Employee age must be at least {MIN_EMPLOYEE_AGE} years old"
    elif employee_input.age > MAX_EMPLOYEE_AGE:
        errors["age"] = f"Employee age must not exceed {MAX_EMPLOYEE_AGE} years old"

    if errors:
        get_logger("directory.validation").warning("Business rule violation", errors=errors)
        raise InvalidInputError("Employee input failed validation", details={"fields": errors})
