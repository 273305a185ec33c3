# ============================================================================
# LOCAL ADAPTER TESTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Tests - In-process backend adapters
# PURPOSE: Verify backend loading and Python exception mapping
# CREATED: 29 SEP 2026
# ============================================================================
"""
Local Adapter Tests

Backends live in tests/local_backends.py and are loaded the same way
FORGE_LOCAL_BACKEND / ANVIL_LOCAL_BACKEND load them in production.

Run with:
    pytest tests/test_local_adapter.py -v
"""

import pytest

from core.contracts import (
    ClientError,
    MalformedPayloadError,
    NetworkError,
    NoAssignmentsError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedError,
    UpstreamTimeoutError,
    ValidationError,
)
from clients.adapters.local import (
    LocalQueueAdapter,
    LocalSampleAdapter,
    load_backend,
    translate_errors,
)
from tests.local_backends import CREATED_AT, InMemoryAnvil, InMemoryForge


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def forge_backend():
    return InMemoryForge()


@pytest.fixture
def anvil_backend():
    return InMemoryAnvil()


def _assignment_raw():
    return {
        "id": "asg-1",
        "queue_id": "queue-1",
        "sample": {"id": "s-1", "pipeline_id": "pipe", "created_at": CREATED_AT},
        "schema": {"fields": [{"name": "quality", "type": "rating", "required": True}]},
    }


# ============================================================================
# LOADING
# ============================================================================

class TestLoadBackend:
    """module:attribute references."""

    def test_class_is_instantiated(self):
        backend = load_backend("tests.local_backends:InMemoryForge")
        assert isinstance(backend, InMemoryForge)

    def test_malformed_reference(self):
        with pytest.raises(ValueError):
            load_backend("tests.local_backends")

    def test_missing_attribute(self):
        with pytest.raises(ValueError, match="NoSuchBackend"):
            load_backend("tests.local_backends:NoSuchBackend")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_backend("no_such_package_xyz:Backend")


# ============================================================================
# EXCEPTION MAPPING
# ============================================================================

class TestTranslateErrors:
    """Python exceptions -> ClientError."""

    @pytest.mark.parametrize(
        "raised,expected",
        [
            (KeyError("k"), NotFoundError),
            (IndexError("i"), NotFoundError),
            (TimeoutError("t"), UpstreamTimeoutError),
            (ConnectionResetError("c"), NetworkError),
            (PermissionError("p"), UnauthorizedError),
            (ValueError("v"), ValidationError),
            (RuntimeError("r"), UnexpectedError),
        ],
    )
    def test_mapping(self, raised, expected):
        with pytest.raises(expected):
            with translate_errors():
                raise raised

    def test_client_errors_pass_through(self):
        original = NotFoundError("already classified")
        with pytest.raises(ClientError) as exc_info:
            with translate_errors(not_found=NoAssignmentsError):
                raise original
        assert exc_info.value is original

    def test_custom_not_found(self):
        with pytest.raises(NoAssignmentsError):
            with translate_errors(not_found=NoAssignmentsError):
                raise LookupError("empty")


# ============================================================================
# FORGE / ANVIL
# ============================================================================

class TestLocalSampleAdapter:
    """Forge running in-process."""

    def test_get_sample(self, forge_backend):
        adapter = LocalSampleAdapter(forge_backend)
        assert adapter.get_sample("s-1").payload == {"text": "hello"}

    def test_missing_sample(self, forge_backend):
        adapter = LocalSampleAdapter(forge_backend)
        with pytest.raises(NotFoundError):
            adapter.get_sample("nope")
        with pytest.raises(NotFoundError):
            adapter.get_artifacts("nope")

    def test_health(self, forge_backend):
        adapter = LocalSampleAdapter(forge_backend)
        adapter.health_check()
        forge_backend.healthy = False
        with pytest.raises(NetworkError):
            adapter.health_check()

    def test_health_check_optional(self):
        class Bare:
            pass

        LocalSampleAdapter(Bare()).health_check()


class TestLocalQueueAdapter:
    """Anvil running in-process."""

    def test_empty_queue(self, anvil_backend):
        with pytest.raises(NoAssignmentsError):
            LocalQueueAdapter(anvil_backend).get_next_assignment("queue-1", "u-1")

    def test_assignment(self, anvil_backend):
        anvil_backend.pending.append(_assignment_raw())
        assignment = LocalQueueAdapter(anvil_backend).get_next_assignment("queue-1", "u-1")
        assert assignment.id == "asg-1"

    def test_submit_label_payload(self, anvil_backend):
        adapter = LocalQueueAdapter(anvil_backend, default_tenant_id="t-1")
        label = adapter.submit_label("asg-1", {"quality": 3}, user_id="u-1", time_spent_ms=50)

        assert label.id == "label-1"
        assert label.tenant_id == "t-1"
        assert anvil_backend.labels == [
            {
                "assignment_id": "asg-1",
                "values": {"quality": 3},
                "time_spent_ms": 50,
                "user_id": "u-1",
                "tenant_id": "t-1",
            }
        ]

    def test_submit_label_field_errors(self, anvil_backend):
        with pytest.raises(ValidationError) as exc_info:
            LocalQueueAdapter(anvil_backend).submit_label("asg-1", {}, user_id="u-1")
        assert exc_info.value.field_errors == {"quality": "is required"}

    def test_stats_get_queue_id(self, anvil_backend):
        stats = LocalQueueAdapter(anvil_backend).get_queue_stats("queue-1")
        assert stats.queue_id == "queue-1"
        assert stats.total == 10

    def test_access(self, anvil_backend):
        adapter = LocalQueueAdapter(anvil_backend)
        assert adapter.check_queue_access("u-1", "queue-1") is True
        assert adapter.check_queue_access("u-1", "private") is False
        with pytest.raises(UnauthorizedError):
            adapter.check_queue_access("blocked", "queue-1")

    def test_non_mapping_label_is_malformed(self):
        class Broken(InMemoryAnvil):
            def submit_label(self, payload):
                return ["not", "a", "label"]

        with pytest.raises(MalformedPayloadError):
            LocalQueueAdapter(Broken()).submit_label("asg-1", {"quality": 1}, user_id="u-1")
