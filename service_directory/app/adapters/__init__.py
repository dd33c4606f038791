"""
Adapters package for the Directory Service.

Contains the HTTP client for the third-party employee API. The client
classifies every response into an outcome value instead of raising, so
retry and fallback policies can decide what to do with it.
"""

from .employee_api_client import EmployeeApiClient
from .outcomes import (
    ClientError,
    NotFound,
    RateLimited,
    Success,
    TransportError,
    UpstreamOutcome,
)

__all__ = [
    "EmployeeApiClient",
    "ClientError",
    "NotFound",
    "RateLimited",
    "Success",
    "TransportError",
    "UpstreamOutcome",
]
