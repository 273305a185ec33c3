# ============================================================================
# BASE CONTRACTS & ERROR TAXONOMY
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Foundation - Core enums and the closed client error set
# PURPOSE: Define upstream names, breaker states, and typed client errors
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ErrorKind, ClientError (+ subclasses), BreakerState, UpstreamName
# ============================================================================
"""
Base contracts for the Ingot client boundary.

Every failure that leaves a client facade is one of the ClientError
subclasses below. Adapters normalize transport-native failures into
this set once, at the adapter boundary; the resilience layer only
retries or short-circuits, it never invents new kinds.

Error kinds:
    not_found        Entity does not exist upstream
    no_assignments   Queue has nothing to hand out (expected, not exceptional)
    timeout          Call exceeded its deadline
    network          Transport failed (connect, reset, 502/503/504)
    unauthorized     Upstream rejected our credentials
    validation       Submitted values failed schema checks (field -> message)
    circuit_open     Breaker is tripped, no network attempt was made
    unexpected       Anything the adapter could not classify
"""

from enum import Enum
from typing import Any, Dict, Optional


# ============================================================================
# ENUMS
# ============================================================================

class UpstreamName(str, Enum):
    """Upstream services this layer talks to."""
    FORGE = "forge"      # Sample / artifact source
    ANVIL = "anvil"      # Labeling queue / assignment service


class ErrorKind(str, Enum):
    """Closed error taxonomy returned by the client facades."""
    NOT_FOUND = "not_found"
    NO_ASSIGNMENTS = "no_assignments"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    CIRCUIT_OPEN = "circuit_open"
    UNEXPECTED = "unexpected"

    def is_retryable(self) -> bool:
        """Only transient transport failures are worth another attempt."""
        return self in (ErrorKind.TIMEOUT, ErrorKind.NETWORK)

    def counts_as_failure(self) -> bool:
        """
        Whether this outcome says the upstream is unhealthy.

        not_found / no_assignments / validation / unauthorized are
        well-formed answers from a working upstream.
        """
        return self in (ErrorKind.TIMEOUT, ErrorKind.NETWORK, ErrorKind.UNEXPECTED)


class BreakerState(str, Enum):
    """
    Circuit breaker states.

    State transitions:
        CLOSED -> OPEN        (failures in window reach threshold)
        OPEN -> HALF_OPEN     (cool-down elapsed)
        HALF_OPEN -> CLOSED   (probe succeeded)
        HALF_OPEN -> OPEN     (probe failed, cool-down restarts)
    """
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


# Read operations that may be retried on timeout/network
IDEMPOTENT_OPERATIONS = frozenset({
    "get_sample",
    "get_artifacts",
    "get_next_assignment",
    "get_queue_stats",
    "check_queue_access",
})


# ============================================================================
# CLIENT ERRORS
# ============================================================================

class ClientError(Exception):
    """Base class for every error a client facade may raise."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str = "",
        *,
        upstream: Optional[str] = None,
        operation: Optional[str] = None,
        detail: Any = None,
    ):
        self.message = message or self.kind.value
        self.upstream = upstream
        self.operation = operation
        self.detail = detail
        super().__init__(self.message)

    @property
    def is_retryable(self) -> bool:
        return self.kind.is_retryable()

    def bind(self, upstream: str, operation: str) -> "ClientError":
        """Attach call-site identifiers if the adapter did not."""
        if self.upstream is None:
            self.upstream = upstream
        if self.operation is None:
            self.operation = operation
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for the UI layer / JSON responses."""
        result: Dict[str, Any] = {"error": self.kind.value, "message": self.message}
        if self.upstream:
            result["upstream"] = self.upstream
        if self.operation:
            result["operation"] = self.operation
        if self.detail is not None:
            result["detail"] = self.detail
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class NotFoundError(ClientError):
    kind = ErrorKind.NOT_FOUND


class NoAssignmentsError(ClientError):
    kind = ErrorKind.NO_ASSIGNMENTS


class UpstreamTimeoutError(ClientError):
    kind = ErrorKind.TIMEOUT


class NetworkError(ClientError):
    kind = ErrorKind.NETWORK


class UnauthorizedError(ClientError):
    kind = ErrorKind.UNAUTHORIZED


class ValidationError(ClientError):
    """Submitted values failed validation. detail is a field -> message map."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field_errors: Dict[str, str], message: str = "", **kwargs):
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors))
        super().__init__(
            message or f"Validation failed: {fields}",
            detail=self.field_errors,
            **kwargs,
        )


class CircuitOpenError(ClientError):
    """Breaker is open; the call was rejected without touching the network."""

    kind = ErrorKind.CIRCUIT_OPEN

    def __init__(self, message: str = "", retry_after_seconds: Optional[float] = None, **kwargs):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            message or "Circuit open",
            detail={"retry_after_seconds": retry_after_seconds},
            **kwargs,
        )


class UnexpectedError(ClientError):
    kind = ErrorKind.UNEXPECTED


class MalformedPayloadError(UnexpectedError):
    """Upstream data could not be turned into a fully-populated DTO."""

    def __init__(self, message: str = "", **kwargs):
        super().__init__(f"malformed_payload: {message}" if message else "malformed_payload", **kwargs)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "UpstreamName",
    "ErrorKind",
    "BreakerState",
    "IDEMPOTENT_OPERATIONS",
    "ClientError",
    "NotFoundError",
    "NoAssignmentsError",
    "UpstreamTimeoutError",
    "NetworkError",
    "UnauthorizedError",
    "ValidationError",
    "CircuitOpenError",
    "UnexpectedError",
    "MalformedPayloadError",
]
