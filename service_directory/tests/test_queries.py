"""
Unit tests for derived directory queries.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.test_helpers import TestDataFactory
from service_directory.app.directory import queries
from service_directory.app.models import Employee


def employee(name="John Doe", salary=75000):
    return Employee.from_upstream(TestDataFactory.create_employee_payload(name=name, salary=salary))


class TestSearchByName:
    """Test cases for search_by_name."""

    @pytest.fixture
    def snapshot(self):
        return (
            employee("John Doe"),
            employee("Jane Smith"),
            employee("john smith"),
            employee("John.Doe"),
            employee("Bob Johnson"),
        )

    def test_case_insensitive_substring(self, snapshot):
        """Test matching ignores case and finds the term anywhere in the name."""
        names = [e.name for e in queries.search_by_name(snapshot, "john")]

        assert names == ["John Doe", "john smith", "John.Doe", "Bob Johnson"]

    def test_uppercase_term(self, snapshot):
        """Test an uppercase term matches lowercase names."""
        names = [e.name for e in queries.search_by_name(snapshot, "SMITH")]

        assert names == ["Jane Smith", "john smith"]

    def test_no_matches(self, snapshot):
        """Test an unmatched term gives an empty list."""
        assert queries.search_by_name(snapshot, "zelda") == []

    def test_empty_snapshot(self):
        """Test searching an empty directory."""
        assert queries.search_by_name((), "john") == []


class TestHighestSalary:
    """Test cases for highest_salary."""

    def test_empty_snapshot_is_zero(self):
        """Test an empty directory yields 0 rather than an error."""
        assert queries.highest_salary(()) == 0

    def test_highest(self):
        """Test the maximum salary is returned."""
        snapshot = (employee(salary=75000), employee(salary=95000))

        assert queries.highest_salary(snapshot) == 95000


class TestTopEarnerNames:
    """Test cases for top_earner_names."""

    def test_twelve_employees_gives_top_ten(self):
        """Test only the ten highest earners are returned, highest first."""
        salaries = [120000 - i * 5000 for i in range(12)]
        snapshot = tuple(employee(f"Employee {i}", salary) for i, salary in enumerate(salaries))

        names = queries.top_earner_names(snapshot)

        assert names == [f"Employee {i}" for i in range(10)]

    def test_unsorted_input(self):
        """Test ordering is by salary, not snapshot position."""
        snapshot = (employee("Low", 10), employee("High", 30), employee("Mid", 20))

        assert queries.top_earner_names(snapshot) == ["High", "Mid", "Low"]

    def test_fewer_than_ten(self):
        """Test small directories return every name."""
        snapshot = (employee("A", 50000), employee("B", 60000))

        assert queries.top_earner_names(snapshot) == ["B", "A"]

    def test_ties_keep_snapshot_order(self):
        """Test equal salaries keep their original relative order."""
        snapshot = (
            employee("First", 50000),
            employee("Top", 90000),
            employee("Second", 50000),
            employee("Third", 50000),
        )

        assert queries.top_earner_names(snapshot) == ["Top", "First", "Second", "Third"]

    def test_empty_snapshot(self):
        """Test an empty directory has no top earners."""
        assert queries.top_earner_names(()) == []
