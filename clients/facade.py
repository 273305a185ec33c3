# ============================================================================
# CLIENT FACADE BASE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Shared plumbing for SampleClient / QueueClient
# PURPOSE: Route every operation through the resilience wrapper with logging
# CREATED: 19 SEP 2026
# ============================================================================
"""
Client Facade Base

The facades are the only objects application code calls. Each holds one
adapter wrapped by a ResilientCaller; the breaker inside the caller is
the only mutable state, so a facade is safe to share between threads.

Guarantees:
- Only ClientError subclasses escape (the caller wraps anything else).
- Successful results are re-validated through DTO.from_raw(), so an
  adapter handing back a raw dict still yields a complete DTO or a
  malformed_payload error.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

from core.config import ResilienceDefaults
from core.contracts import BreakerState, ClientError, ErrorKind, UpstreamName
from core.logging import log_context
from health.core import HealthStatus
from infrastructure import CircuitBreaker, ResilientCaller, RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_caller(upstream: str, resilience: Optional[ResilienceDefaults] = None,
                 breaker: Optional[CircuitBreaker] = None) -> ResilientCaller:
    """ResilientCaller for one upstream from the configured defaults."""
    resilience = resilience or ResilienceDefaults()
    breaker = breaker or CircuitBreaker(
        upstream,
        failure_threshold=resilience.breaker_failure_threshold,
        window_seconds=resilience.breaker_window_seconds,
        cooldown_seconds=resilience.breaker_cooldown_seconds,
    )
    return ResilientCaller(
        upstream,
        breaker,
        retry=RetryPolicy(
            max_attempts=resilience.retry_max_attempts,
            base_delay_seconds=resilience.retry_base_delay_seconds,
        ),
        timeout_seconds=resilience.timeout_seconds,
        max_workers=resilience.max_workers,
    )


class ClientFacade:
    """Base class for the per-upstream facades."""

    upstream: UpstreamName

    def __init__(self, adapter, caller: Optional[ResilientCaller] = None,
                 breaker: Optional[CircuitBreaker] = None,
                 resilience: Optional[ResilienceDefaults] = None):
        self.adapter = adapter
        self._caller = caller or build_caller(self.upstream.value, resilience, breaker)

    @property
    def breaker(self) -> CircuitBreaker:
        return self._caller.breaker

    def breaker_state(self) -> BreakerState:
        """Current breaker state for this upstream."""
        return self.breaker.state

    def health_check(self) -> HealthStatus:
        """
        Ping the upstream (no retries; timeout and breaker apply).

        Returns:
            HealthStatus.HEALTHY

        Raises:
            ClientError: Upstream unreachable, erroring, or breaker open
        """
        self._call("health_check", self.adapter.health_check)
        return HealthStatus.HEALTHY

    def close(self) -> None:
        self._caller.close()
        self.adapter.close()

    def _call(self, operation: str, func: Callable[[], T], **log_fields) -> T:
        name = self.upstream.value
        with log_context(upstream=name, operation=operation, **log_fields):
            started = time.perf_counter()
            try:
                result = self._caller.call(operation, func)
            except ClientError as e:
                duration_ms = (time.perf_counter() - started) * 1000
                if e.kind is ErrorKind.UNEXPECTED:
                    logger.error(f"{name}.{operation} failed in {duration_ms:.1f}ms: {e.message}")
                elif e.kind.counts_as_failure() or e.kind is ErrorKind.CIRCUIT_OPEN:
                    logger.warning(f"{name}.{operation} {e.kind.value} after {duration_ms:.1f}ms")
                else:
                    logger.debug(f"{name}.{operation} -> {e.kind.value} in {duration_ms:.1f}ms")
                raise
            duration_ms = (time.perf_counter() - started) * 1000
            logger.debug(f"{name}.{operation} ok in {duration_ms:.1f}ms")
            return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(adapter={type(self.adapter).__name__}, "
            f"breaker={self.breaker_state().value})"
        )


__all__ = ["ClientFacade", "build_caller"]
