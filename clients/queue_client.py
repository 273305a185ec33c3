# ============================================================================
# ANVIL CLIENT FACADE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Stable Anvil interface for application code
# PURPOSE: Assignments, labels and queue stats behind timeout / retry / breaker
# CREATED: 19 SEP 2026
# ============================================================================
"""
QueueClient

submit_label is a create and is never retried here; a timeout may mean
the label was stored, so the decision to resubmit belongs to the caller.

Usage:
    from clients import QueueClient

    anvil = QueueClient.from_config()
    assignment = anvil.get_next_assignment("queue-abc", user_id="u-1")
    label = anvil.submit_label(assignment.id, {"coherence": 4}, user_id="u-1")
"""

from typing import Any, Dict, Optional

from core.config import ClientConfig, get_config
from core.contracts import UpstreamName
from core.models import Assignment, Label, QueueStats
from clients.adapters import create_queue_adapter
from clients.base import QueueAdapter
from clients.facade import ClientFacade
from infrastructure import CircuitBreaker


class QueueClient(ClientFacade):
    """Anvil facade."""

    upstream = UpstreamName.ANVIL

    def __init__(self, adapter: QueueAdapter, **kwargs):
        super().__init__(adapter, **kwargs)

    @classmethod
    def from_config(
        cls,
        config: Optional[ClientConfig] = None,
        breaker: Optional[CircuitBreaker] = None,
    ) -> "QueueClient":
        """Build with the adapter and resilience policy named by config."""
        config = config or get_config()
        return cls(create_queue_adapter(config), breaker=breaker, resilience=config.resilience)

    def get_next_assignment(
        self,
        queue_id: str,
        user_id: str,
        tenant_id: Optional[str] = None,
    ) -> Assignment:
        """
        Check out the next assignment for a user.

        Raises:
            NoAssignmentsError: Nothing to label (expected, render "nothing to do")
        """
        return self._call(
            "get_next_assignment",
            lambda: Assignment.from_raw(
                self.adapter.get_next_assignment(queue_id, user_id, tenant_id=tenant_id)
            ),
            queue_id=queue_id,
            user_id=user_id,
        )

    def submit_label(
        self,
        assignment_id: str,
        values: Dict[str, Any],
        user_id: Optional[str] = None,
        time_spent_ms: int = 0,
        tenant_id: Optional[str] = None,
    ) -> Label:
        """
        Submit a label (single attempt).

        Raises:
            ValidationError: field -> message map, render inline
        """
        return self._call(
            "submit_label",
            lambda: Label.from_raw(
                self.adapter.submit_label(
                    assignment_id,
                    values,
                    user_id=user_id,
                    time_spent_ms=time_spent_ms,
                    tenant_id=tenant_id,
                )
            ),
            assignment_id=assignment_id,
            user_id=user_id,
        )

    def get_queue_stats(self, queue_id: str, tenant_id: Optional[str] = None) -> QueueStats:
        """Progress metrics; labeled + remaining == total always holds."""
        return self._call(
            "get_queue_stats",
            lambda: QueueStats.from_raw(self.adapter.get_queue_stats(queue_id, tenant_id=tenant_id)),
            queue_id=queue_id,
        )

    def check_queue_access(self, user_id: str, queue_id: str) -> bool:
        return self._call(
            "check_queue_access",
            lambda: bool(self.adapter.check_queue_access(user_id, queue_id)),
            queue_id=queue_id,
            user_id=user_id,
        )


__all__ = ["QueueClient"]
