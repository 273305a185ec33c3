# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Model exports
# PURPOSE: Central export point for all value objects
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Frozen pydantic value objects the rest of the application operates on.
They carry data only; adapters build them with from_raw().
"""

from core.models.base import DTOModel
from core.models.sample import Artifact, ArtifactType, Sample
from core.models.schema import FieldType, SchemaField, LabelSchema
from core.models.assignment import Assignment, Label, COMPONENT_MODULE_KEY
from core.models.queue_stats import QueueStats

__all__ = [
    "DTOModel",
    # Forge
    "Artifact",
    "ArtifactType",
    "Sample",
    # Schema
    "FieldType",
    "SchemaField",
    "LabelSchema",
    # Anvil
    "Assignment",
    "Label",
    "COMPONENT_MODULE_KEY",
    "QueueStats",
]
