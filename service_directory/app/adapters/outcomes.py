"""
Tagged outcomes of a single upstream employee API call.

The client never raises for upstream behaviour; it classifies each response
into one of these values. ``NotFound`` and ``RateLimited`` are only produced
from responses the upstream actually sent; anything unreadable becomes a
``TransportError``.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from shared.errors import (
    EmployeeNotFoundError,
    RateLimitError,
    UpstreamUnavailableError,
)


T = TypeVar("T")

UPSTREAM_SERVICE = "employee_api"


@dataclass(frozen=True)
class Success(Generic[T]):
    """The upstream call succeeded."""
    payload: T

    ok = True

    def unwrap(self, operation: str = "") -> T:
        return self.payload


@dataclass(frozen=True)
class NotFound:
    """The upstream reported the requested employee does not exist."""
    ok = False

    def unwrap(self, operation: str = "") -> Any:
        raise EmployeeNotFoundError(
            message="Employee not found",
            details={"operation": operation}
        )


@dataclass(frozen=True)
class RateLimited:
    """The upstream answered 429.

    ``exhausted`` is set by the retry policy once it has given up; a plain
    rate-limit from one call carries ``attempts=1``.
    """
    attempts: int = 1
    exhausted: bool = False

    ok = False

    def unwrap(self, operation: str = "") -> Any:
        message = (
            f"Rate limit still active after {self.attempts} attempts"
            if self.exhausted else "Rate limit exceeded"
        )
        raise RateLimitError(
            message,
            details={
                "operation": operation,
                "attempts": self.attempts,
                "exhausted": self.exhausted
            }
        )


@dataclass(frozen=True)
class ClientError:
    """Any other non-success HTTP status from the upstream."""
    status_code: int

    ok = False

    def unwrap(self, operation: str = "") -> Any:
        raise UpstreamUnavailableError(
            UPSTREAM_SERVICE,
            f"Unexpected status {self.status_code}",
            details={"operation": operation, "status_code": self.status_code}
        )


@dataclass(frozen=True)
class TransportError:
    """Network failure or a response that could not be understood."""
    reason: str

    ok = False

    def unwrap(self, operation: str = "") -> Any:
        raise UpstreamUnavailableError(
            UPSTREAM_SERVICE,
            self.reason,
            details={"operation": operation}
        )


UpstreamOutcome = Union[Success[T], NotFound, RateLimited, ClientError, TransportError]


def is_rate_limited(outcome: Any) -> bool:
    """Retry classifier: only rate-limited outcomes are retried."""
    return isinstance(outcome, RateLimited)


def mark_exhausted(outcome: Any, attempts: int) -> RateLimited:
    """Turn the final rate-limited outcome into a terminal one."""
    return RateLimited(attempts=attempts, exhausted=True)


def outcome_label(outcome: Any) -> str:
    """Short label for logs and metrics."""
    return {
        Success: "success",
        NotFound: "not_found",
        RateLimited: "rate_limited",
        ClientError: "client_error",
        TransportError: "transport_error",
    }.get(type(outcome), "unknown")
