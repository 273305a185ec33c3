# ============================================================================
# QUEUE STATS MODEL
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Queue progress snapshot
# PURPOSE: Dashboard/progress counts with an enforced consistency check
# CREATED: 15 SEP 2026
# ============================================================================
"""
Queue Stats Model

Read-only snapshot of a queue's progress. Always stale by network
latency; never authoritative.

Invariant: labeled + remaining == total
"""

from typing import Dict, Optional, Union

from pydantic import Field, StrictFloat, StrictInt, model_validator

from core.models.base import DTOModel


class QueueStats(DTOModel):
    """Queue-level statistics and progress metrics."""

    queue_id: Optional[str] = None
    total: StrictInt = Field(..., ge=0)
    labeled: StrictInt = Field(..., ge=0)
    remaining: StrictInt = Field(..., ge=0)
    agreement_scores: Dict[str, Union[StrictInt, StrictFloat]] = Field(
        default_factory=dict, description="field name -> inter-labeler agreement"
    )
    active_labelers: StrictInt = Field(0, ge=0)

    @model_validator(mode="after")
    def _counts_add_up(self) -> "QueueStats":
        if self.labeled + self.remaining != self.total:
            raise ValueError(
                f"labeled ({self.labeled}) + remaining ({self.remaining}) "
                f"!= total ({self.total})"
            )
        return self

    @classmethod
    def from_counts(
        cls,
        labeled: int,
        remaining: int,
        **kwargs,
    ) -> "QueueStats":
        """Build stats deriving total from labeled + remaining."""
        return cls.from_raw(
            {"total": labeled + remaining, "labeled": labeled, "remaining": remaining, **kwargs}
        )

    @property
    def progress(self) -> float:
        """Fraction labeled (0.0 for an empty queue)."""
        if self.total == 0:
            return 0.0
        return self.labeled / self.total


__all__ = ["QueueStats"]
