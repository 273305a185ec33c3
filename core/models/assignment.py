# ============================================================================
# ASSIGNMENT & LABEL MODELS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Anvil labeling value objects
# PURPOSE: One unit of labeling work and the label submitted against it
# CREATED: 14 SEP 2026
# ============================================================================
"""
Assignment & Label Models

An Assignment binds a queue, a sample, and a schema. It is "checked out"
to a user by Anvil until submitted, skipped, or expired; this layer does
not enforce that lifecycle, it only carries the identifiers needed to
submit against it.

A Label is write-once from this layer's perspective: submission is a
create, never an update.
"""

from typing import Any, Dict, List, Optional

from pydantic import AwareDatetime, Field, StrictInt

from core.models.base import DTOModel
from core.models.sample import Sample
from core.models.schema import LabelSchema

# Metadata key carrying the rendering component name
COMPONENT_MODULE_KEY = "component_module"


class Label(DTOModel):
    """A completed label submission."""

    id: str = Field(..., min_length=1)
    assignment_id: str = Field(..., min_length=1)
    sample_id: str = Field(..., min_length=1)
    queue_id: str = Field(..., min_length=1)
    tenant_id: Optional[str] = None
    namespace: Optional[str] = None
    user_id: str = Field(..., min_length=1, description="Submitting labeler")
    values: Dict[str, Any] = Field(default_factory=dict, description="field name -> value")
    time_spent_ms: StrictInt = Field(0, ge=0)
    created_at: AwareDatetime
    lineage_ref: Optional[str] = None


class Assignment(DTOModel):
    """Labeling task with context."""

    id: str = Field(..., min_length=1)
    queue_id: str = Field(..., min_length=1)
    tenant_id: Optional[str] = None
    namespace: Optional[str] = None
    sample: Sample
    label_schema: LabelSchema = Field(..., alias="schema")
    existing_labels: List[Label] = Field(
        default_factory=list, description="Prior labels for review/adjudication flows"
    )
    assigned_at: Optional[AwareDatetime] = None
    expires_at: Optional[AwareDatetime] = None
    lineage_ref: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def component_module(self) -> Optional[str]:
        """Component name from assignment metadata, else from the schema."""
        name = self.metadata.get(COMPONENT_MODULE_KEY)
        if isinstance(name, str) and name.strip():
            return name.strip()
        return self.label_schema.component_module or None


__all__ = ["Assignment", "Label", "COMPONENT_MODULE_KEY"]
