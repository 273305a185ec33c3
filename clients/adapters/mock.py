# ============================================================================
# MOCK ADAPTERS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - In-memory Forge / Anvil stand-ins
# PURPOSE: Run the UI and exercise error paths with no upstream processes
# CREATED: 17 SEP 2026
# ============================================================================
"""
Mock Adapters

Selected with FORGE_ADAPTER=mock / ANVIL_ADAPTER=mock (the default).
No network, no subprocess, no shared state beyond the adapter instance.

Determinism:
    Forge sample ids starting with "test-" and Anvil queue ids starting
    with "queue-" always succeed. Any other id fails with not_found /
    no_assignments with probability error_rate, drawn from a seedable
    random.Random so error-path tests can be made repeatable.

Fixed answers:
    queue stats          500 total / 47 labeled / 453 remaining, 3 active labelers
    check_queue_access   "queue_restricted" -> False, "nonexistent_queue" -> not_found
"""

import logging
import random
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.contracts import NoAssignmentsError, NotFoundError, ValidationError
from core.models import (
    COMPONENT_MODULE_KEY,
    Artifact,
    Assignment,
    Label,
    LabelSchema,
    QueueStats,
    Sample,
)
from clients.base import QueueAdapter, SampleAdapter

logger = logging.getLogger(__name__)

DETERMINISTIC_SAMPLE_PREFIX = "test-"
DETERMINISTIC_QUEUE_PREFIX = "queue-"
ARTIFACT_SAMPLE_PREFIX = "test-artifacts"

MOCK_PIPELINE_ID = "test_pipeline"

MOCK_PAYLOAD = {
    "narrative_a": (
        "Narrative A presents a perspective focusing on economic growth and "
        "technological innovation as primary drivers of progress."
    ),
    "narrative_b": (
        "Narrative B emphasizes environmental sustainability and social equity "
        "as essential foundations for long-term prosperity."
    ),
    "synthesis": (
        "A balanced approach recognizes that economic growth and environmental "
        "sustainability are not mutually exclusive but rather interdependent."
    ),
}

MOCK_RATING_FIELDS = ("coherence", "grounded", "novel", "balanced")

MOCK_AGREEMENT = {
    "coherence": 0.82,
    "grounded": 0.78,
    "novel": 0.65,
    "balanced": 0.75,
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def mock_schema_raw(component_module: Optional[str] = None) -> Dict[str, Any]:
    """Four required 1-5 rating fields."""
    raw: Dict[str, Any] = {
        "id": "schema-mock",
        "fields": [
            {"name": name, "type": "rating", "required": True, "min": 1, "max": 5}
            for name in MOCK_RATING_FIELDS
        ],
    }
    if component_module:
        raw["component_module"] = component_module
    return raw


class _MockBase:
    """Shared latency / random-failure behaviour."""

    def __init__(
        self,
        error_rate: float = 0.0,
        seed: Optional[int] = None,
        latency_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not 0.0 <= error_rate <= 1.0:
            raise ValueError(f"error_rate must be between 0 and 1, got {error_rate}")
        self.error_rate = error_rate
        self.latency_seconds = latency_seconds
        self._rng = random.Random(seed)
        self._sleep = sleep

    def _delay(self) -> None:
        if self.latency_seconds > 0:
            self._sleep(self.latency_seconds)

    def _should_fail(self, identifier: str, deterministic_prefix: str) -> bool:
        if identifier.startswith(deterministic_prefix):
            return False
        return self.error_rate > 0 and self._rng.random() < self.error_rate


# ============================================================================
# FORGE
# ============================================================================

class MockSampleAdapter(_MockBase, SampleAdapter):
    """Forge stand-in returning a fixed narrative sample."""

    name = "mock"

    def get_sample(self, sample_id: str, tenant_id: Optional[str] = None) -> Sample:
        self._delay()
        if self._should_fail(sample_id, DETERMINISTIC_SAMPLE_PREFIX):
            raise NotFoundError(f"Sample {sample_id} not found")
        return Sample.from_raw(self._sample_raw(sample_id, tenant_id))

    def get_artifacts(self, sample_id: str, tenant_id: Optional[str] = None) -> List[Artifact]:
        self._delay()
        if self._should_fail(sample_id, DETERMINISTIC_SAMPLE_PREFIX):
            raise NotFoundError(f"Sample {sample_id} not found")
        return [Artifact.from_raw(raw) for raw in self._artifacts_raw(sample_id)]

    def health_check(self) -> None:
        self._delay()

    def _sample_raw(self, sample_id: str, tenant_id: Optional[str]) -> Dict[str, Any]:
        raw: Dict[str, Any] = {
            "id": sample_id,
            "pipeline_id": MOCK_PIPELINE_ID,
            "payload": dict(MOCK_PAYLOAD),
            "artifacts": self._artifacts_raw(sample_id),
            "metadata": {"model": "gpt-4", "temperature": 0.7, "generated_at": _now_iso()},
            "created_at": _now_iso(),
        }
        if tenant_id:
            raw["tenant_id"] = tenant_id
        return raw

    @staticmethod
    def _artifacts_raw(sample_id: str) -> List[Dict[str, Any]]:
        # Most samples have no artifacts
        if not sample_id.startswith(ARTIFACT_SAMPLE_PREFIX):
            return []
        return [
            {
                "id": f"{sample_id}-img",
                "sample_id": sample_id,
                "artifact_type": "image",
                "url": f"https://forge.invalid/artifacts/{sample_id}/preview.png",
                "filename": "preview.png",
                "size_bytes": 20480,
                "content_type": "image/png",
            },
            {
                "id": f"{sample_id}-json",
                "sample_id": sample_id,
                "artifact_type": "json",
                "url": f"https://forge.invalid/artifacts/{sample_id}/trace.json",
                "filename": "trace.json",
                "size_bytes": 512,
                "content_type": "application/json",
            },
        ]


# ============================================================================
# ANVIL
# ============================================================================

class MockQueueAdapter(_MockBase, QueueAdapter):
    """
    Anvil stand-in.

    Issued assignments are remembered so a later submit_label can link
    the label to its sample / queue / tenant and validate against the
    assignment's schema.
    """

    name = "mock"

    def __init__(
        self,
        error_rate: float = 0.0,
        seed: Optional[int] = None,
        latency_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        component_modules: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(error_rate=error_rate, seed=seed, latency_seconds=latency_seconds, sleep=sleep)
        self.component_modules: Dict[str, str] = dict(component_modules or {})
        self._issued: Dict[str, Assignment] = {}
        self._lock = threading.Lock()

    def get_next_assignment(
        self,
        queue_id: str,
        user_id: str,
        tenant_id: Optional[str] = None,
    ) -> Assignment:
        self._delay()
        if self._should_fail(queue_id, DETERMINISTIC_QUEUE_PREFIX):
            raise NoAssignmentsError(f"Queue {queue_id} has no assignments")

        sample_id = f"sample-{self._rng.randint(1, 1000)}"
        metadata: Dict[str, Any] = {}
        component = self.component_modules.get(queue_id)
        if component:
            metadata[COMPONENT_MODULE_KEY] = component

        raw: Dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "queue_id": queue_id,
            "sample": {
                "id": sample_id,
                "pipeline_id": MOCK_PIPELINE_ID,
                "payload": dict(MOCK_PAYLOAD),
                "artifacts": [],
                "metadata": {"model": "test", "temperature": 0.7},
                "created_at": _now_iso(),
            },
            "schema": mock_schema_raw(),
            "existing_labels": [],
            "assigned_at": _now_iso(),
            "metadata": metadata,
        }
        if tenant_id:
            raw["tenant_id"] = tenant_id

        assignment = Assignment.from_raw(raw)
        with self._lock:
            self._issued[assignment.id] = assignment
        logger.debug(f"Mock assignment {assignment.id} issued to {user_id} on {queue_id}")
        return assignment

    def submit_label(
        self,
        assignment_id: str,
        values: Dict[str, Any],
        user_id: Optional[str] = None,
        time_spent_ms: int = 0,
        tenant_id: Optional[str] = None,
    ) -> Label:
        self._delay()
        with self._lock:
            assignment = self._issued.get(assignment_id)

        schema = assignment.label_schema if assignment else LabelSchema.from_raw(mock_schema_raw())
        errors = schema.validate_values(values)
        if errors:
            raise ValidationError(errors)

        raw: Dict[str, Any] = {
            "id": str(uuid.uuid4()),
            "assignment_id": assignment_id,
            "sample_id": assignment.sample.id if assignment else "unknown",
            "queue_id": assignment.queue_id if assignment else "unknown",
            "user_id": user_id or "anonymous",
            "values": dict(values),
            "time_spent_ms": time_spent_ms,
            "created_at": _now_iso(),
        }
        tenant = tenant_id or (assignment.tenant_id if assignment else None)
        if tenant:
            raw["tenant_id"] = tenant
        return Label.from_raw(raw)

    def get_queue_stats(self, queue_id: str, tenant_id: Optional[str] = None) -> QueueStats:
        self._delay()
        return QueueStats.from_counts(
            labeled=47,
            remaining=453,
            queue_id=queue_id,
            agreement_scores=dict(MOCK_AGREEMENT),
            active_labelers=3,
        )

    def check_queue_access(self, user_id: str, queue_id: str) -> bool:
        self._delay()
        if user_id == "nonexistent" or queue_id == "nonexistent_queue":
            raise NotFoundError(f"Unknown user or queue: {user_id} / {queue_id}")
        if user_id == "admin_user":
            return True
        return queue_id != "queue_restricted"

    def health_check(self) -> None:
        self._delay()

    @property
    def issued_count(self) -> int:
        with self._lock:
            return len(self._issued)


__all__ = [
    "MockSampleAdapter",
    "MockQueueAdapter",
    "mock_schema_raw",
    "DETERMINISTIC_SAMPLE_PREFIX",
    "DETERMINISTIC_QUEUE_PREFIX",
]
