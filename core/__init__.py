# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core module initialization
# PURPOSE: Export error taxonomy and value objects
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import (
    BreakerState,
    ClientError,
    ErrorKind,
    UpstreamName,
)
from core.models import (
    Artifact,
    Assignment,
    Label,
    LabelSchema,
    QueueStats,
    Sample,
    SchemaField,
)

__all__ = [
    # Enums
    "BreakerState",
    "ErrorKind",
    "UpstreamName",
    # Errors
    "ClientError",
    # Models
    "Artifact",
    "Assignment",
    "Label",
    "LabelSchema",
    "QueueStats",
    "Sample",
    "SchemaField",
]
