# ============================================================================
# CIRCUIT BREAKER
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Per-upstream failure isolation
# PURPOSE: Fail fast while an upstream is down, probe it after a cool-down
# CREATED: 16 SEP 2026
# ============================================================================
"""
Circuit Breaker

One instance per upstream, constructed once at process start and shared
by every caller of that upstream (injected, never a module global).

States:
    CLOSED     Calls pass through; upstream-health failures are counted
               in a rolling window.
    OPEN       Calls are rejected with CircuitOpenError, no network attempt.
    HALF_OPEN  Cool-down elapsed; exactly one probe call is let through.

Transitions:
    CLOSED -> OPEN         failures within window_seconds reach failure_threshold
    OPEN -> HALF_OPEN      cool-down elapsed (evaluated lazily on the next call)
    HALF_OPEN -> CLOSED    probe succeeded
    HALF_OPEN -> OPEN      probe failed; cool-down restarts

Concurrency:
    All transitions happen under a single lock. The CLOSED fast path in
    acquire() reads the state attribute without taking the lock.
"""

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

from core.contracts import BreakerState, CircuitOpenError

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Three-state breaker for a single upstream service."""

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        window_seconds: float = 60.0,
        cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            name: Upstream name (used in errors and logs)
            failure_threshold: Failures within the window that trip the breaker
            window_seconds: Rolling window for counting failures
            cooldown_seconds: Time spent OPEN before a probe is allowed
            clock: Monotonic time source (injectable for tests)
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")

        self.name = name
        self.failure_threshold = failure_threshold
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock

        self._lock = threading.Lock()
        self._state = BreakerState.CLOSED
        self._failures: Deque[float] = deque()
        self._opened_at: Optional[float] = None
        self._probe_in_flight = False

    # ------------------------------------------------------------------
    # READS
    # ------------------------------------------------------------------

    @property
    def state(self) -> BreakerState:
        """
        Current state as a caller would see it.

        An OPEN breaker whose cool-down has elapsed reports HALF_OPEN even
        though the transition itself happens on the next acquire().
        """
        state = self._state
        if state is BreakerState.OPEN and self._cooldown_elapsed():
            return BreakerState.HALF_OPEN
        return state

    @property
    def is_open(self) -> bool:
        return self.state is BreakerState.OPEN

    def retry_after(self) -> Optional[float]:
        """Seconds until a probe will be allowed (None unless OPEN)."""
        opened_at = self._opened_at
        if self._state is not BreakerState.OPEN or opened_at is None:
            return None
        return max(0.0, opened_at + self.cooldown_seconds - self._clock())

    def snapshot(self) -> Dict[str, Any]:
        """Point-in-time view for health checks and dashboards."""
        with self._lock:
            self._prune(self._clock())
            return {
                "name": self.name,
                "state": self.state.value,
                "failure_count": len(self._failures),
                "failure_threshold": self.failure_threshold,
                "retry_after_seconds": self.retry_after(),
                "probe_in_flight": self._probe_in_flight,
            }

    # ------------------------------------------------------------------
    # CALL GATE
    # ------------------------------------------------------------------

    def acquire(self) -> bool:
        """
        Ask permission to make a call.

        Returns:
            True if this call is the half-open probe, False for a normal call

        Raises:
            CircuitOpenError: If the breaker is open (or a probe is already running)
        """
        state = self._state
        if state is BreakerState.CLOSED:
            return False
        if state is BreakerState.OPEN and not self._cooldown_elapsed():
            raise CircuitOpenError(
                f"Circuit open for {self.name}",
                retry_after_seconds=self.retry_after(),
                upstream=self.name,
            )

        # Lock only for the OPEN -> HALF_OPEN transition and the probe slot
        with self._lock:
            if self._state is BreakerState.CLOSED:
                return False

            if self._state is BreakerState.OPEN:
                if not self._cooldown_elapsed():
                    raise CircuitOpenError(
                        f"Circuit open for {self.name}",
                        retry_after_seconds=self.retry_after(),
                        upstream=self.name,
                    )
                self._transition(BreakerState.HALF_OPEN)

            # HALF_OPEN: a single probe at a time
            if self._probe_in_flight:
                raise CircuitOpenError(
                    f"Circuit half-open for {self.name}, probe in flight",
                    upstream=self.name,
                )
            self._probe_in_flight = True
            return True

    def record_success(self, probe: bool = False) -> None:
        """Record a call that reached a working upstream."""
        with self._lock:
            if probe:
                self._probe_in_flight = False
                self._failures.clear()
                self._opened_at = None
                self._transition(BreakerState.CLOSED)
            elif self._state is BreakerState.CLOSED:
                # Consecutive-failure semantics: a success resets the count
                self._failures.clear()

    def record_failure(self, probe: bool = False) -> None:
        """Record an upstream-health failure (timeout / network / unexpected)."""
        with self._lock:
            now = self._clock()
            if probe:
                self._probe_in_flight = False
                self._open(now)
                return

            self._prune(now)
            self._failures.append(now)
            if self._state is BreakerState.CLOSED and len(self._failures) >= self.failure_threshold:
                self._open(now)

    def release(self, probe: bool) -> None:
        """Give back a probe slot without recording an outcome."""
        if probe:
            with self._lock:
                self._probe_in_flight = False

    def reset(self) -> None:
        """Force the breaker closed and forget failures."""
        with self._lock:
            self._failures.clear()
            self._opened_at = None
            self._probe_in_flight = False
            self._transition(BreakerState.CLOSED)

    # ------------------------------------------------------------------
    # INTERNALS (call with lock held)
    # ------------------------------------------------------------------

    def _cooldown_elapsed(self) -> bool:
        opened_at = self._opened_at
        return opened_at is not None and self._clock() - opened_at >= self.cooldown_seconds

    def _prune(self, now: float) -> None:
        horizon = now - self.window_seconds
        while self._failures and self._failures[0] <= horizon:
            self._failures.popleft()

    def _open(self, now: float) -> None:
        self._opened_at = now
        self._transition(BreakerState.OPEN)

    def _transition(self, new_state: BreakerState) -> None:
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        if new_state is BreakerState.OPEN:
            logger.warning(
                f"Circuit breaker {self.name}: {old_state.value} -> open "
                f"(failures={len(self._failures)}, cooldown={self.cooldown_seconds}s)"
            )
        else:
            logger.info(f"Circuit breaker {self.name}: {old_state.value} -> {new_state.value}")

    def __repr__(self) -> str:
        return f"CircuitBreaker(name={self.name!r}, state={self.state.value!r})"


__all__ = ["CircuitBreaker"]
