"""
Employee data models for the Directory Service.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


MIN_EMPLOYEE_AGE = 16
MAX_EMPLOYEE_AGE = 75


class Employee(BaseModel):
    """Employee record as served by the directory."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Upstream-assigned employee ID")
    name: str = Field(..., description="Employee name")
    salary: int = Field(..., description="Annual salary")
    age: int = Field(..., description="Age in years")
    title: str = Field(..., description="Job title")
    email: Optional[str] = Field(None, description="Upstream-assigned email")

    @classmethod
    def from_upstream(cls, payload: Dict[str, Any]) -> "Employee":
        """Build an employee from the upstream ``employee_*`` wire shape."""
        return cls(
            id=str(payload["id"]),
            name=payload["employee_name"],
            salary=payload["employee_salary"],
            age=payload["employee_age"],
            title=payload["employee_title"],
            email=payload.get("employee_email"),
        )


# Published directory snapshots are immutable tuples in upstream order.
DirectorySnapshot = Tuple[Employee, ...]


class CreateEmployeeInput(BaseModel):
    """Request model for creating an employee.

    Shape only; business rules (non-blank text, positive salary, age range)
    are enforced by the directory service so they hold for every caller.
    """

    name: Optional[str] = Field(None, description="Employee name")
    salary: Optional[int] = Field(None, description="Annual salary, positive")
    age: Optional[int] = Field(None, description=f"Age, {MIN_EMPLOYEE_AGE}-{MAX_EMPLOYEE_AGE} inclusive")
    title: Optional[str] = Field(None, description="Job title")

    def to_upstream(self) -> Dict[str, Any]:
        """Request body for the upstream create call."""
        return {
            "name": self.name,
            "salary": self.salary,
            "age": self.age,
            "title": self.title,
        }
