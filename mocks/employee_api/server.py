"""
Mock employee API server simulating the unreliable third-party directory.

Serves the same routes and ``{data, status}`` envelope as the real API,
keeps employees in memory, and answers 429 once a sliding-window request
budget is spent. Failures can also be injected for the next N requests.
"""

import random
import time
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from shared.logging import get_logger


SUCCESS_STATUS = "Successfully processed request."
REQUEST_LOG_SIZE = 1000

FIRST_NAMES = [
    "John", "Jane", "Alice", "Bob", "Carlos", "Diana", "Ethan", "Fatima",
    "George", "Hana", "Ivan", "Julia", "Kwame", "Laura", "Miguel", "Nora",
]
LAST_NAMES = [
    "Doe", "Smith", "Johnson", "Garcia", "Nguyen", "Okafor", "Rossi",
    "Schmidt", "Tanaka", "Walker", "Young", "Zhang",
]
TITLES = [
    "Software Engineer", "Senior Engineer", "Product Manager", "Designer",
    "Data Analyst", "Engineering Manager", "Support Specialist", "Recruiter",
]


class MockCreateEmployeeRequest(BaseModel):
    """Upstream create request."""
    name: str = Field(..., min_length=1)
    salary: int = Field(..., gt=0)
    age: int = Field(..., ge=16, le=75)
    title: str = Field(..., min_length=1)

    @field_validator("name", "title")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class MockDeleteEmployeeRequest(BaseModel):
    """Upstream delete request (keyed by name)."""
    name: str = Field(..., min_length=1)


class MockEmployeeApiServer:
    """Mock employee API server implementation."""

    def __init__(
        self,
        port: int = 8112,
        *,
        seed_count: int = 50,
        request_limit: Optional[int] = None,
        window_seconds: float = 60.0,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.port = port
        self.logger = get_logger("mock.employee_api")
        self.app = FastAPI(title="Mock Employee API", version="1.0.0")

        self.request_limit = request_limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._request_times: Deque[float] = deque()
        self._injected: Deque[int] = deque()

        self.employees: Dict[str, Dict[str, Any]] = {}
        self.request_log: Deque[Tuple[str, str]] = deque(maxlen=REQUEST_LOG_SIZE)
        self._seed_employees(seed_count, random.Random(seed))

        self._setup_middleware()
        self._setup_routes()

    def _seed_employees(self, count: int, rng: random.Random):
        """Create sample employees."""
        for _ in range(count):
            first = rng.choice(FIRST_NAMES)
            last = rng.choice(LAST_NAMES)
            self.add_employee(
                name=f"{first} {last}",
                salary=rng.randrange(40_000, 250_000, 500),
                age=rng.randint(18, 70),
                title=rng.choice(TITLES),
            )

    def add_employee(self, name: str, salary: int, age: int, title: str) -> Dict[str, Any]:
        """Insert an employee record in upstream wire format."""
        name = name.strip()
        if not name:
            raise ValueError("employee name must not be blank")
        employee = {
            "id": str(uuid.uuid4()),
            "employee_name": name,
            "employee_salary": salary,
            "employee_age": age,
            "employee_title": title,
            "employee_email": f"{name.split()[0].lower()}@company.com",
        }
        self.employees[employee["id"]] = employee
        return employee

    def inject_failures(self, status_code: int = 429, count: int = 1):
        """Answer the next ``count`` requests with ``status_code``."""
        self._injected.extend([status_code] * count)

    def reset(self):
        """Clear rate-limit state, injected failures and the request log."""
        self._request_times.clear()
        self._injected.clear()
        self.request_log.clear()

    def _rate_limited(self) -> bool:
        if self.request_limit is None:
            return False
        now = self._clock()
        while self._request_times and now - self._request_times[0] >= self.window_seconds:
            self._request_times.popleft()
        if len(self._request_times) >= self.request_limit:
            return True
        self._request_times.append(now)
        return False

    def _setup_middleware(self):
        """Simulate upstream unreliability ahead of every route."""

        @self.app.middleware("http")
        async def simulate_unreliability(request: Request, call_next):
            self.request_log.append((request.method, request.url.path))

            if self._injected:
                status_code = self._injected.popleft()
                self.logger.info("Injected failure", status_code=status_code, path=request.url.path)
                return JSONResponse(status_code=status_code, content={"status": "Injected failure"})

            if self._rate_limited():
                self.logger.info("Rate limit exceeded", path=request.url.path)
                return JSONResponse(status_code=429, content={"status": "Too Many Requests"})

            return await call_next(request)

    def _setup_routes(self):
        """Set up mock routes."""

        @self.app.get("/api/v1/employee")
        async def get_employees():
            return {"data": list(self.employees.values()), "status": SUCCESS_STATUS}

        @self.app.get("/api/v1/employee/{employee_id}")
        async def get_employee(employee_id: str):
            employee = self.employees.get(employee_id)
            if employee is None:
                return JSONResponse(status_code=404, content={"data": None, "status": "Employee not found"})
            return {"data": employee, "status": SUCCESS_STATUS}

        @self.app.post("/api/v1/employee")
        async def create_employee(payload: MockCreateEmployeeRequest):
            employee = self.add_employee(payload.name, payload.salary, payload.age, payload.title)
            self.logger.info("Created employee", employee_id=employee["id"])
            return {"data": employee, "status": SUCCESS_STATUS}

        @self.app.delete("/api/v1/employee")
        async def delete_employee(payload: MockDeleteEmployeeRequest = Body(...)):
            for employee_id, employee in list(self.employees.items()):
                if employee["employee_name"] == payload.name:
                    del self.employees[employee_id]
                    self.logger.info("Deleted employee", employee_id=employee_id)
                    return {"data": True, "status": SUCCESS_STATUS}
            return {"data": False, "status": SUCCESS_STATUS}


def create_app() -> FastAPI:
    """Create the mock server with a tight rate limit, like the real upstream."""
    return MockEmployeeApiServer(request_limit=10, window_seconds=30.0).app


if __name__ == "__main__":
    import uvicorn

    server = MockEmployeeApiServer(request_limit=10, window_seconds=30.0)
    uvicorn.run(server.app, host="0.0.0.0", port=server.port)
