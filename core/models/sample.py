# ============================================================================
# SAMPLE & ARTIFACT MODELS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Forge sample value objects
# PURPOSE: UI-facing representation of samples and their media artifacts
# CREATED: 14 SEP 2026
# ============================================================================
"""
Sample & Artifact Models

A Sample is created by Forge and is read-only to this layer. Artifacts are
media files (images, audio, json blobs...) attached to a sample, exposed
through time-limited signed URLs. The URL expiry is enforced upstream;
callers should not hold on to an Artifact past a session lifetime.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AwareDatetime, Field, StrictInt

from core.models.base import DTOModel


class ArtifactType(str, Enum):
    """Well-known artifact type tags. Other tags are passed through as-is."""
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    JSON = "json"
    BINARY = "binary"


class Artifact(DTOModel):
    """File/blob reference with a signed URL."""

    id: str = Field(..., min_length=1)
    sample_id: str = Field(..., min_length=1)
    artifact_type: str = Field(..., min_length=1, description="image | audio | json | binary | ...")
    url: str = Field(..., min_length=1, description="Signed, time-limited URL")
    filename: str
    size_bytes: StrictInt = Field(..., ge=0)
    content_type: str

    @property
    def is_image(self) -> bool:
        return self.artifact_type == ArtifactType.IMAGE.value


class Sample(DTOModel):
    """
    UI-friendly sample representation.

    Decouples the UI from Forge's internal sample schema.
    """

    id: str = Field(..., min_length=1)
    pipeline_id: str = Field(..., min_length=1, description="Owning Forge pipeline")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Opaque JSON payload")
    artifacts: List[Artifact] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: AwareDatetime

    # Multi-tenant passthrough (never interpreted here)
    tenant_id: Optional[str] = None
    namespace: Optional[str] = None
    lineage_ref: Optional[str] = None

    def artifact(self, artifact_id: str) -> Optional[Artifact]:
        """Look up an artifact by id."""
        for item in self.artifacts:
            if item.id == artifact_id:
                return item
        return None


__all__ = ["ArtifactType", "Artifact", "Sample"]
