# ============================================================================
# RESILIENCE WRAPPER
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Timeout, retry and breaker around adapter calls
# PURPOSE: Uniform failure policy independent of the configured adapter
# CREATED: 16 SEP 2026
# ============================================================================
"""
Resilience Wrapper

Applies the same cross-cutting policy to every adapter call:

1. Circuit breaker gate (per upstream). An open breaker rejects the call
   with CircuitOpenError before anything else happens.
2. Timeout. Each attempt runs on a worker thread and the caller waits at
   most timeout_seconds; exceeding it raises UpstreamTimeoutError. The
   worker is abandoned, the caller never hangs.
3. Retry. Only idempotent reads (IDEMPOTENT_OPERATIONS) and only on
   timeout / network errors. Linear backoff: base_delay * attempt_number.
   submit_label and health_check are never retried here.
4. One outcome per call is recorded on the breaker, after retries.

Exceptions that are not ClientError are logged with traceback and
re-raised as UnexpectedError; nothing is swallowed.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from core.contracts import (
    IDEMPOTENT_OPERATIONS,
    ClientError,
    UnexpectedError,
    UpstreamTimeoutError,
)
from core.logging import get_current_context, log_context
from infrastructure.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Retry policy for idempotent reads.

    Attributes:
        max_attempts: Total attempts including the first (1 disables retry)
        base_delay_seconds: Linear backoff unit
        sleep: Sleep function (injectable for tests)
    """
    max_attempts: int = 3
    base_delay_seconds: float = 0.2
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return self.base_delay_seconds * attempt


class ResilientCaller:
    """
    Wraps adapter calls for one upstream.

    Holds no per-call state; the only shared mutable state is the
    injected breaker.
    """

    def __init__(
        self,
        upstream: str,
        breaker: CircuitBreaker,
        retry: Optional[RetryPolicy] = None,
        timeout_seconds: float = 5.0,
        max_workers: int = 16,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self.upstream = upstream
        self.breaker = breaker
        self.retry = retry or RetryPolicy()
        self.timeout_seconds = timeout_seconds
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=f"{upstream}-call",
        )

    def call(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run func(*args, **kwargs) under the resilience policy.

        Args:
            operation: Operation name (decides retry eligibility)
            func: Adapter method to invoke

        Returns:
            Whatever func returns

        Raises:
            ClientError: Always one of the closed taxonomy
        """
        try:
            probe = self.breaker.acquire()
        except ClientError as e:
            e.bind(self.upstream, operation)
            logger.debug(f"{self.upstream}.{operation} short-circuited: {e.message}")
            raise

        settled = False
        try:
            result = self._call_with_retry(operation, func, args, kwargs, probe)
            self.breaker.record_success(probe)
            settled = True
            return result
        except ClientError as e:
            if e.kind.counts_as_failure():
                self.breaker.record_failure(probe)
            else:
                self.breaker.record_success(probe)
            settled = True
            raise
        finally:
            if not settled:
                self.breaker.release(probe)

    def close(self) -> None:
        """Stop the worker pool (does not wait for abandoned calls)."""
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # INTERNALS
    # ------------------------------------------------------------------

    def _call_with_retry(self, operation: str, func, args, kwargs, probe: bool = False):
        # A half-open probe is a single adapter call
        if probe or operation not in IDEMPOTENT_OPERATIONS:
            attempts = 1
        else:
            attempts = self.retry.max_attempts

        for attempt in range(1, attempts + 1):
            try:
                return self._attempt(operation, func, args, kwargs)
            except ClientError as e:
                if attempt >= attempts or not e.is_retryable:
                    raise
                delay = self.retry.delay_for(attempt)
                logger.warning(
                    f"{self.upstream}.{operation} attempt {attempt}/{attempts} "
                    f"failed ({e.kind.value}), retrying in {delay:.2f}s"
                )
                self.retry.sleep(delay)

        # range() above always returns or raises
        raise UnexpectedError("retry loop exhausted", upstream=self.upstream, operation=operation)

    def _attempt(self, operation: str, func, args, kwargs):
        context = get_current_context().to_dict()

        def run():
            with log_context(**context):
                return func(*args, **kwargs)

        future = self._executor.submit(run)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FuturesTimeoutError:
            future.cancel()
            raise UpstreamTimeoutError(
                f"{self.upstream}.{operation} exceeded {self.timeout_seconds}s",
                upstream=self.upstream,
                operation=operation,
            )
        except ClientError as e:
            raise e.bind(self.upstream, operation)
        except Exception as e:
            logger.exception(f"Unclassified failure in {self.upstream}.{operation}: {e}")
            raise UnexpectedError(
                f"{type(e).__name__}: {e}",
                upstream=self.upstream,
                operation=operation,
                detail=repr(e),
            ) from e


__all__ = ["RetryPolicy", "ResilientCaller"]
