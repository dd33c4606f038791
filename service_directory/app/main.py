"""
Directory service for the Employee Directory Access Layer.
"""

import asyncio
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from fastapi import Path

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import InvalidInputError

from .adapters.employee_api_client import EmployeeApiClient
from .directory.service import EmployeeDirectoryService
from .models import CreateEmployeeInput, Employee


UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
NAME_SEARCH_PATTERN = re.compile(r"^[a-zA-Z.]{1,100}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s.'-]{1,100}$")

SERVICE_NAME = "directory"
SERVICE_PORT = 8080


class DirectoryService(BaseService):
    """Directory service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config=config)

        self.client = EmployeeApiClient(
            self.config.employee_api_url,
            timeout=self.config.upstream_timeout_seconds,
            transport=transport,
            metrics=self.metrics
        )
        self.directory = EmployeeDirectoryService(
            self.client,
            retry_config=self.config.retry_config(),
            metrics=self.metrics,
            sleep=sleep
        )

        self._setup_directory_routes()

    def _setup_directory_routes(self):
        """Set up employee routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Employee Directory Access Layer - Directory Service",
                "version": "1.0.0",
                "capabilities": ["cache_aside", "rate_limit_retry", "stale_fallback"]
            }

        @self.app.get("/api/v1/employee", response_model=List[Employee])
        async def get_all_employees():
            """List every employee."""
            employees = await self.directory.get_all()
            self.logger.info("Returning employees", count=len(employees))
            return list(employees)

        @self.app.get("/api/v1/employee/search/{search_string}", response_model=List[Employee])
        async def search_employees(search_string: str = Path(..., description="Name fragment")):
            """Case-insensitive substring search over employee names."""
            if not NAME_SEARCH_PATTERN.fullmatch(search_string):
                raise InvalidInputError(
                    "Invalid search string",
                    details={"search_string": search_string}
                )
            return await self.directory.search_by_name(search_string)

        @self.app.get("/api/v1/employee/highest-salary", response_model=int)
        async def get_highest_salary():
            """Highest salary across all employees."""
            return await self.directory.get_highest_salary()

        @self.app.get("/api/v1/employee/top-ten-highest-earning", response_model=List[str])
        async def get_top_ten_highest_earning():
            """Names of the ten highest-earning employees."""
            return await self.directory.get_top_ten_names()

        @self.app.get("/api/v1/employee/{employee_id}", response_model=Employee)
        async def get_employee(employee_id: str = Path(..., description="Employee UUID")):
            """Fetch one employee."""
            self._validate_employee_id(employee_id)
            return await self.directory.get_by_id(employee_id)

        @self.app.post("/api/v1/employee", response_model=Employee, status_code=201)
        async def create_employee(employee_input: CreateEmployeeInput):
            """Create an employee."""
            if employee_input.name is not None and not NAME_PATTERN.fullmatch(employee_input.name):
                raise InvalidInputError("Invalid employee name format", details={"name": employee_input.name})
            if employee_input.title is not None and not NAME_PATTERN.fullmatch(employee_input.title):
                raise InvalidInputError("Invalid employee title format", details={"title": employee_input.title})
            return await self.directory.create(employee_input)

        @self.app.delete("/api/v1/employee/{employee_id}", response_model=str)
        async def delete_employee(employee_id: str = Path(..., description="Employee UUID")):
            """Delete an employee and return its name."""
            self._validate_employee_id(employee_id)
            return await self.directory.delete_by_id(employee_id)

    @staticmethod
    def _validate_employee_id(employee_id: str) -> None:
        if not UUID_PATTERN.fullmatch(employee_id):
            raise InvalidInputError("Invalid UUID format for id", details={"id": employee_id})

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report directory cache state."""
        stats = self.directory.cache.stats()
        return {"directory_cache": "warm" if stats["cached"] else "cold"}


def create_app(config: Optional[ServiceConfig] = None):
    """Create directory service application."""
    service = DirectoryService(config or get_config(SERVICE_NAME, SERVICE_PORT))
    return service.app


if __name__ == "__main__":
    service = DirectoryService()
    service.run()
