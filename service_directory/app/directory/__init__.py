"""
Directory domain package: fallback resolution, derived queries and the
service facade used by the API routes.
"""

from .service import EmployeeDirectoryService

__all__ = ["EmployeeDirectoryService"]
