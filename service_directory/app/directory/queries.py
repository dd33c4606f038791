"""
Derived queries over a directory snapshot.
"""

from typing import List, Sequence

from ..models import Employee


TOP_EARNERS_LIMIT = 10


def search_by_name(snapshot: Sequence[Employee], term: str) -> List[Employee]:
    """Employees whose name contains ``term``, ignoring case, in snapshot order."""
    needle = term.lower()
    return [employee for employee in snapshot if needle in employee.name.lower()]


def highest_salary(snapshot: Sequence[Employee]) -> int:
    """Highest salary in the snapshot, 0 when it is empty."""
    return max((employee.salary for employee in snapshot), default=0)


def top_earner_names(snapshot: Sequence[Employee], limit: int = TOP_EARNERS_LIMIT) -> List[str]:
    """Names of the ``limit`` best-paid employees, highest first.

    ``sorted`` is stable, so employees with equal salaries keep their
    snapshot order.
    """
    ranked = sorted(snapshot, key=lambda employee: employee.salary, reverse=True)
    return [employee.name for employee in ranked[:limit]]
