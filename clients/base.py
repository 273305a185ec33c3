# ============================================================================
# ADAPTER CONTRACTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Abstract transport interfaces per upstream
# PURPOSE: Operations every Forge / Anvil adapter must implement
# CREATED: 17 SEP 2026
# ============================================================================
"""
Adapter Contracts

An adapter translates calls into one concrete transport (in-process,
HTTP, mock) and normalizes transport-native failures into the
ClientError taxonomy. Adapters return fully-populated DTOs or raise;
they never return partial objects and never apply retry or breaker
policy themselves (that is ResilientCaller's job).

Implementations:
    clients.adapters.mock    Deterministic / randomized, no I/O
    clients.adapters.http    httpx against the /v1 REST APIs
    clients.adapters.local   In-process backend object
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.models import Artifact, Assignment, Label, QueueStats, Sample


class SampleAdapter(ABC):
    """Forge transport: samples and their artifacts."""

    name: str = "abstract"

    @abstractmethod
    def get_sample(self, sample_id: str, tenant_id: Optional[str] = None) -> Sample:
        """
        Fetch one sample.

        Raises:
            NotFoundError: Sample does not exist
        """

    @abstractmethod
    def get_artifacts(self, sample_id: str, tenant_id: Optional[str] = None) -> List[Artifact]:
        """List artifacts attached to a sample."""

    @abstractmethod
    def health_check(self) -> None:
        """Return quietly if the upstream answers, raise ClientError otherwise."""

    def close(self) -> None:
        """Release transport resources (no-op by default)."""


class QueueAdapter(ABC):
    """Anvil transport: assignments, labels and queue statistics."""

    name: str = "abstract"

    @abstractmethod
    def get_next_assignment(
        self,
        queue_id: str,
        user_id: str,
        tenant_id: Optional[str] = None,
    ) -> Assignment:
        """
        Check out the next assignment for a user.

        Raises:
            NoAssignmentsError: Queue has nothing to hand out
        """

    @abstractmethod
    def submit_label(
        self,
        assignment_id: str,
        values: Dict[str, Any],
        user_id: Optional[str] = None,
        time_spent_ms: int = 0,
        tenant_id: Optional[str] = None,
    ) -> Label:
        """
        Create a label for an assignment.

        Raises:
            ValidationError: Values fail the assignment schema (field -> message)
            NotFoundError: Unknown assignment
        """

    @abstractmethod
    def get_queue_stats(self, queue_id: str, tenant_id: Optional[str] = None) -> QueueStats:
        """Progress and agreement metrics for a queue."""

    @abstractmethod
    def check_queue_access(self, user_id: str, queue_id: str) -> bool:
        """
        Whether a user may label a queue.

        Raises:
            NotFoundError: Unknown queue or user
        """

    @abstractmethod
    def health_check(self) -> None:
        """Return quietly if the upstream answers, raise ClientError otherwise."""

    def close(self) -> None:
        """Release transport resources (no-op by default)."""


__all__ = ["SampleAdapter", "QueueAdapter"]
