# ============================================================================
# CIRCUIT BREAKER TESTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Tests - Breaker state machine
# PURPOSE: Verify open / half-open / closed transitions with a fake clock
# CREATED: 27 SEP 2026
# ============================================================================
"""
Circuit Breaker Tests

Covers:
1. CLOSED -> OPEN after failure_threshold failures in the window
2. Failures outside the window are forgotten
3. A success while CLOSED resets the count
4. OPEN rejects with CircuitOpenError and a retry-after hint
5. HALF_OPEN admits exactly one probe
6. Probe success closes, probe failure re-opens

Run with:
    pytest tests/test_circuit_breaker.py -v
"""

import threading

import pytest

from core.contracts import BreakerState, CircuitOpenError, ErrorKind
from infrastructure import CircuitBreaker


# ============================================================================
# FIXTURES
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(
        "forge",
        failure_threshold=3,
        window_seconds=60.0,
        cooldown_seconds=30.0,
        clock=clock,
    )


def _fail(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        probe = breaker.acquire()
        breaker.record_failure(probe)


# ============================================================================
# CLOSED
# ============================================================================

class TestClosed:
    """Counting failures."""

    def test_starts_closed(self, breaker):
        assert breaker.state is BreakerState.CLOSED
        assert breaker.acquire() is False
        assert breaker.retry_after() is None

    def test_opens_at_threshold(self, breaker):
        _fail(breaker, 2)
        assert breaker.state is BreakerState.CLOSED
        _fail(breaker, 1)
        assert breaker.state is BreakerState.OPEN
        assert breaker.is_open

    def test_success_resets_count(self, breaker):
        _fail(breaker, 2)
        breaker.record_success(breaker.acquire())
        _fail(breaker, 2)
        assert breaker.state is BreakerState.CLOSED

    def test_failures_outside_window_expire(self, breaker, clock):
        _fail(breaker, 2)
        clock.advance(61)
        _fail(breaker, 2)
        assert breaker.state is BreakerState.CLOSED
        assert breaker.snapshot()["failure_count"] == 2

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            CircuitBreaker("forge", failure_threshold=0)


# ============================================================================
# OPEN / HALF-OPEN
# ============================================================================

class TestOpen:
    """Short-circuiting and probing."""

    def test_open_rejects_with_retry_after(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(10)

        with pytest.raises(CircuitOpenError) as exc_info:
            breaker.acquire()

        err = exc_info.value
        assert err.kind is ErrorKind.CIRCUIT_OPEN
        assert err.upstream == "forge"
        assert err.retry_after_seconds == pytest.approx(20.0)

    def test_open_rejection_does_not_wait_for_transition_lock(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(10)
        outcome = []

        def fail_fast():
            try:
                breaker.acquire()
            except CircuitOpenError as e:
                outcome.append(e)

        with breaker._lock:
            worker = threading.Thread(target=fail_fast)
            worker.start()
            worker.join(timeout=1.0)
            rejected_while_locked = not worker.is_alive()

        worker.join()
        assert rejected_while_locked
        assert len(outcome) == 1
        assert outcome[0].retry_after_seconds == pytest.approx(20.0)

    def test_reports_half_open_after_cooldown(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(30)
        assert breaker.state is BreakerState.HALF_OPEN

    def test_single_probe_in_half_open(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(31)

        assert breaker.acquire() is True
        with pytest.raises(CircuitOpenError):
            breaker.acquire()
        assert breaker.snapshot()["probe_in_flight"] is True

    def test_probe_success_closes(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(31)

        probe = breaker.acquire()
        breaker.record_success(probe)

        assert breaker.state is BreakerState.CLOSED
        assert breaker.snapshot()["failure_count"] == 0
        assert breaker.acquire() is False

    def test_probe_failure_reopens_with_fresh_cooldown(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(31)

        probe = breaker.acquire()
        breaker.record_failure(probe)

        assert breaker.state is BreakerState.OPEN
        assert breaker.retry_after() == pytest.approx(30.0)

    def test_release_frees_probe_slot(self, breaker, clock):
        _fail(breaker, 3)
        clock.advance(31)

        probe = breaker.acquire()
        breaker.release(probe)
        assert breaker.acquire() is True

    def test_reset(self, breaker):
        _fail(breaker, 3)
        breaker.reset()
        assert breaker.state is BreakerState.CLOSED
        assert breaker.snapshot() == {
            "name": "forge",
            "state": "closed",
            "failure_count": 0,
            "failure_threshold": 3,
            "retry_after_seconds": None,
            "probe_in_flight": False,
        }
