"""
Upstream employee API client for the Directory Service.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING
import httpx

from shared.logging import get_logger
from ..models import CreateEmployeeInput, Employee
from .outcomes import (
    ClientError,
    NotFound,
    RateLimited,
    Success,
    TransportError,
    UpstreamOutcome,
    outcome_label,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


EMPLOYEE_PATH = "/api/v1/employee"


class EmployeeApiClient:
    """Client for the third-party employee directory API.

    Every method performs exactly one HTTP round trip and returns an
    ``UpstreamOutcome``; retries and caching are layered on by callers.
    """

    def __init__(
        self,
        employee_api_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = employee_api_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self.metrics = metrics
        self.logger = get_logger("directory.employee_api_client")

    async def fetch_all(self) -> UpstreamOutcome[List[Employee]]:
        """Fetch every employee."""
        outcome = await self._request("fetch_all", "GET", EMPLOYEE_PATH)
        if not isinstance(outcome, Success):
            return outcome

        data = outcome.payload
        if data is None:
            return self._malformed("fetch_all", "missing employee list")
        if not isinstance(data, list):
            return self._malformed("fetch_all", "expected a list of employees")
        try:
            employees = [Employee.from_upstream(item) for item in data]
        except (KeyError, TypeError, ValueError) as exc:
            return self._malformed("fetch_all", f"unreadable employee record: {exc}")

        self.logger.info("Fetched employees", count=len(employees))
        return Success(employees)

    async def fetch_by_id(self, employee_id: str) -> UpstreamOutcome[Employee]:
        """Fetch one employee by ID."""
        outcome = await self._request("fetch_by_id", "GET", f"{EMPLOYEE_PATH}/{employee_id}")
        if not isinstance(outcome, Success):
            return outcome

        if outcome.payload is None:
            self.logger.warning("Received empty employee payload", employee_id=employee_id)
            return NotFound()
        return self._parse_employee("fetch_by_id", outcome.payload)

    async def create(self, employee_input: CreateEmployeeInput) -> UpstreamOutcome[Employee]:
        """Create an employee."""
        outcome = await self._request(
            "create", "POST", EMPLOYEE_PATH, json=employee_input.to_upstream()
        )
        if not isinstance(outcome, Success):
            return outcome

        if outcome.payload is None:
            return self._malformed("create", "created employee missing from response")
        return self._parse_employee("create", outcome.payload)

    async def delete_by_name(self, name: str) -> UpstreamOutcome[Any]:
        """Delete an employee; the upstream keys deletes by name."""
        return await self._request("delete_by_name", "DELETE", EMPLOYEE_PATH, json={"name": name})

    def _parse_employee(self, operation: str, payload: Any) -> UpstreamOutcome[Employee]:
        try:
            return Success(Employee.from_upstream(payload))
        except (KeyError, TypeError, ValueError) as exc:
            return self._malformed(operation, f"unreadable employee record: {exc}")

    def _malformed(self, operation: str, reason: str) -> TransportError:
        self.logger.error("Malformed upstream payload", operation=operation, reason=reason)
        return TransportError(f"Malformed response: {reason}")

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> UpstreamOutcome[Any]:
        """Execute one call and classify the response.

        Returns ``Success`` carrying the envelope's ``data`` member.
        """
        url = f"{self.base_url}{path}"

        if self.metrics is not None:
            with self.metrics.time_operation("upstream_call_duration_seconds", operation=operation):
                outcome = await self._send(operation, method, url, json)
            self.metrics.increment_counter(
                "upstream_calls_total", operation=operation, outcome=outcome_label(outcome)
            )
        else:
            outcome = await self._send(operation, method, url, json)

        return outcome

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]],
    ) -> UpstreamOutcome[Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            self.logger.error(
                "Employee API transport error",
                operation=operation,
                url=url,
                error=str(exc)
            )
            return TransportError(f"{type(exc).__name__}: {exc}")

        if response.status_code == 429:
            self.logger.warning("Rate limit hit (429)", operation=operation, url=url)
            return RateLimited()

        if response.status_code == 404:
            self.logger.info("Employee API returned not found", operation=operation, url=url)
            return NotFound()

        if not response.is_success:
            self.logger.error(
                "Employee API request failed",
                operation=operation,
                url=url,
                status_code=response.status_code,
                response=response.text
            )
            return ClientError(response.status_code)

        if not response.content:
            return Success(None)

        try:
            envelope = response.json()
        except ValueError as exc:
            return self._malformed(operation, f"invalid JSON: {exc}")
        if not isinstance(envelope, dict):
            return self._malformed(operation, "expected a JSON object envelope")

        self.logger.debug(
            "Employee API request succeeded",
            operation=operation,
            url=url,
            status=envelope.get("status")
        )
        return Success(envelope.get("data"))
