# ============================================================================
# RESILIENCE WRAPPER TESTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Tests - Timeout, retry and breaker composition
# PURPOSE: Verify ResilientCaller and the facades built on it
# CREATED: 28 SEP 2026
# ============================================================================
"""
Resilience Wrapper Tests

Covers:
1. Linear backoff retry for idempotent reads on timeout / network
2. No retry for submit_label, health_check, or non-transient errors
3. Per-attempt timeout with a hanging adapter
4. Breaker opens after repeated failures and short-circuits the adapter
5. One breaker outcome per facade call, regardless of retries
6. Unknown adapter exceptions become UnexpectedError
7. Logging context reaches the worker thread
8. The half-open call after cool-down is a single adapter attempt

Scripted adapters count their calls; sleeps and clocks are injected.

Run with:
    pytest tests/test_resilience.py -v
"""

import threading
from datetime import datetime, timezone

import pytest

from core.config import ResilienceDefaults
from core.contracts import (
    BreakerState,
    CircuitOpenError,
    ErrorKind,
    MalformedPayloadError,
    NetworkError,
    NotFoundError,
    UnexpectedError,
    UpstreamTimeoutError,
    ValidationError,
)
from core.logging import get_current_context, log_context
from clients import QueueClient, SampleClient
from clients.base import QueueAdapter, SampleAdapter
from infrastructure import CircuitBreaker, ResilientCaller, RetryPolicy


# ============================================================================
# FIXTURES
# ============================================================================

class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _sample_raw(sample_id="test-1"):
    return {
        "id": sample_id,
        "pipeline_id": "pipe",
        "payload": {},
        "created_at": datetime(2026, 9, 14, tzinfo=timezone.utc).isoformat(),
    }


class ScriptedSampleAdapter(SampleAdapter):
    """Plays back a script of results / exceptions, counting calls."""

    name = "scripted"

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = 0
        self.health_calls = 0

    def _next(self, sample_id):
        self.calls += 1
        if self.script:
            step = self.script.pop(0)
            if isinstance(step, Exception):
                raise step
            return step
        return _sample_raw(sample_id)

    def get_sample(self, sample_id, tenant_id=None):
        return self._next(sample_id)

    def get_artifacts(self, sample_id, tenant_id=None):
        self.calls += 1
        return []

    def health_check(self):
        self.health_calls += 1
        if self.script:
            step = self.script.pop(0)
            if isinstance(step, Exception):
                raise step


class ScriptedQueueAdapter(QueueAdapter):
    """Anvil adapter whose submit_label always times out."""

    name = "scripted"

    def __init__(self):
        self.submit_calls = 0

    def get_next_assignment(self, queue_id, user_id, tenant_id=None):
        raise NotImplementedError

    def submit_label(self, assignment_id, values, user_id=None, time_spent_ms=0, tenant_id=None):
        self.submit_calls += 1
        raise UpstreamTimeoutError("slow write")

    def get_queue_stats(self, queue_id, tenant_id=None):
        raise NotImplementedError

    def check_queue_access(self, user_id, queue_id):
        return True

    def health_check(self):
        return None


@pytest.fixture
def delays():
    return []


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker("forge", failure_threshold=5, window_seconds=60, cooldown_seconds=30, clock=clock)


@pytest.fixture
def caller(breaker, delays):
    caller = ResilientCaller(
        "forge",
        breaker,
        retry=RetryPolicy(max_attempts=3, base_delay_seconds=0.2, sleep=delays.append),
        timeout_seconds=1.0,
        max_workers=4,
    )
    yield caller
    caller.close()


def _sample_client(adapter, caller):
    return SampleClient(adapter, caller=caller)


# ============================================================================
# RETRY
# ============================================================================

class TestRetry:
    """Retry policy for idempotent reads."""

    def test_two_timeouts_then_success(self, caller, delays):
        adapter = ScriptedSampleAdapter([UpstreamTimeoutError("t1"), UpstreamTimeoutError("t2")])
        client = _sample_client(adapter, caller)

        sample = client.get_sample("test-1")

        assert sample.id == "test-1"
        assert adapter.calls == 3
        assert delays == [pytest.approx(0.2), pytest.approx(0.4)]

    def test_gives_up_after_max_attempts(self, caller, delays):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 3)
        client = _sample_client(adapter, caller)

        with pytest.raises(NetworkError):
            client.get_sample("test-1")

        assert adapter.calls == 3
        assert len(delays) == 2

    def test_not_found_is_not_retried(self, caller, delays):
        adapter = ScriptedSampleAdapter([NotFoundError("gone")])
        client = _sample_client(adapter, caller)

        with pytest.raises(NotFoundError) as exc_info:
            client.get_sample("test-1")

        assert adapter.calls == 1
        assert delays == []
        assert exc_info.value.upstream == "forge"
        assert exc_info.value.operation == "get_sample"

    def test_submit_label_called_once_on_timeout(self, delays):
        adapter = ScriptedQueueAdapter()
        anvil_caller = ResilientCaller(
            "anvil",
            CircuitBreaker("anvil"),
            retry=RetryPolicy(sleep=delays.append),
            timeout_seconds=1.0,
        )
        client = QueueClient(adapter, caller=anvil_caller)

        with pytest.raises(UpstreamTimeoutError):
            client.submit_label("asg-1", {"quality": 3}, user_id="u-1")

        assert adapter.submit_calls == 1
        assert delays == []
        anvil_caller.close()

    def test_health_check_is_not_retried(self, caller, delays):
        adapter = ScriptedSampleAdapter([NetworkError("down")])
        client = _sample_client(adapter, caller)

        with pytest.raises(NetworkError):
            client.health_check()

        assert adapter.health_calls == 1
        assert delays == []

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_delay_is_linear(self):
        policy = RetryPolicy(base_delay_seconds=0.5)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 1.5]


# ============================================================================
# TIMEOUT / UNEXPECTED
# ============================================================================

class TestTimeout:
    """Per-attempt deadline."""

    def test_hanging_adapter_times_out(self, breaker):
        release = threading.Event()
        caller = ResilientCaller(
            "forge", breaker, retry=RetryPolicy(max_attempts=1), timeout_seconds=0.05
        )

        try:
            with pytest.raises(UpstreamTimeoutError) as exc_info:
                caller.call("get_sample", release.wait, 5)
        finally:
            release.set()
            caller.close()

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.operation == "get_sample"
        assert breaker.snapshot()["failure_count"] == 1

    def test_unknown_exception_becomes_unexpected(self, caller):
        def boom():
            raise KeyError("surprise")

        with pytest.raises(UnexpectedError) as exc_info:
            caller.call("get_sample", boom)

        assert "KeyError" in exc_info.value.message
        assert exc_info.value.upstream == "forge"

    def test_malformed_payload_counts_as_failure(self, caller, breaker):
        adapter = ScriptedSampleAdapter([{"id": "test-1"}])
        client = _sample_client(adapter, caller)

        with pytest.raises(MalformedPayloadError):
            client.get_sample("test-1")

        assert breaker.snapshot()["failure_count"] == 1

    def test_invalid_timeout(self, breaker):
        with pytest.raises(ValueError):
            ResilientCaller("forge", breaker, timeout_seconds=0)


# ============================================================================
# BREAKER INTEGRATION
# ============================================================================

class TestBreakerIntegration:
    """Breaker wraps the whole retried call."""

    def test_one_outcome_per_call(self, caller, breaker):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 3)
        client = _sample_client(adapter, caller)

        with pytest.raises(NetworkError):
            client.get_sample("test-1")

        assert adapter.calls == 3
        assert breaker.snapshot()["failure_count"] == 1

    def test_opens_and_short_circuits(self, caller, breaker):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 15)
        client = _sample_client(adapter, caller)

        for _ in range(5):
            with pytest.raises(NetworkError):
                client.get_sample("test-1")
        assert client.breaker_state() is BreakerState.OPEN
        calls_before = adapter.calls

        with pytest.raises(CircuitOpenError) as exc_info:
            client.get_sample("test-1")

        assert adapter.calls == calls_before
        assert exc_info.value.operation == "get_sample"
        assert exc_info.value.retry_after_seconds == pytest.approx(30.0)

    def test_probe_after_cooldown_closes(self, caller, breaker, clock):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 15)
        client = _sample_client(adapter, caller)
        for _ in range(5):
            with pytest.raises(NetworkError):
                client.get_sample("test-1")

        clock.advance(31)
        adapter.script.clear()

        assert client.get_sample("test-1").id == "test-1"
        assert client.breaker_state() is BreakerState.CLOSED

    def test_failed_half_open_call_is_a_single_adapter_call(self, caller, breaker, clock, delays):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 15)
        client = _sample_client(adapter, caller)
        for _ in range(5):
            with pytest.raises(NetworkError):
                client.get_sample("test-1")

        clock.advance(31)
        adapter.script = [UpstreamTimeoutError("still down")] * 3
        adapter.calls = 0
        delays.clear()

        with pytest.raises(UpstreamTimeoutError):
            client.get_sample("test-1")

        assert adapter.calls == 1
        assert delays == []
        assert client.breaker_state() is BreakerState.OPEN

    def test_failed_half_open_call_restarts_cooldown(self, caller, breaker, clock):
        adapter = ScriptedSampleAdapter([NetworkError("n")] * 15)
        client = _sample_client(adapter, caller)
        for _ in range(5):
            with pytest.raises(NetworkError):
                client.get_sample("test-1")

        clock.advance(31)
        adapter.script = [NetworkError("still down")]
        with pytest.raises(NetworkError):
            client.get_sample("test-1")
        calls_after_reopen = adapter.calls

        clock.advance(29)
        with pytest.raises(CircuitOpenError) as exc_info:
            client.get_sample("test-1")
        assert exc_info.value.retry_after_seconds == pytest.approx(1.0)
        assert adapter.calls == calls_after_reopen

        clock.advance(1)
        assert client.get_sample("test-1").id == "test-1"
        assert adapter.calls == calls_after_reopen + 1
        assert client.breaker_state() is BreakerState.CLOSED

    def test_expected_errors_do_not_trip(self, caller, breaker):
        adapter = ScriptedSampleAdapter(
            [NotFoundError("x")] * 5 + [ValidationError({"a": "b"})] * 5
        )
        client = _sample_client(adapter, caller)

        for _ in range(10):
            with pytest.raises((NotFoundError, ValidationError)):
                client.get_sample("missing")

        assert client.breaker_state() is BreakerState.CLOSED

    def test_breakers_are_per_upstream(self):
        defaults = ResilienceDefaults(retry_base_delay_seconds=0.0)
        forge = SampleClient(ScriptedSampleAdapter(), resilience=defaults)
        anvil = QueueClient(ScriptedQueueAdapter(), resilience=defaults)
        try:
            assert forge.breaker is not anvil.breaker
            assert forge.breaker.name == "forge"
            assert anvil.breaker.name == "anvil"
        finally:
            forge.close()
            anvil.close()


# ============================================================================
# LOGGING CONTEXT
# ============================================================================

class TestContextPropagation:
    """Context fields are visible inside the adapter call."""

    def test_context_reaches_worker_thread(self, caller):
        seen = {}

        def capture():
            context = get_current_context()
            seen["queue_id"] = context.queue_id
            seen["thread"] = threading.current_thread().name
            return True

        with log_context(queue_id="queue-7", correlation_id="req-1"):
            caller.call("check_queue_access", capture)

        assert seen["queue_id"] == "queue-7"
        assert seen["thread"].startswith("forge-call")
