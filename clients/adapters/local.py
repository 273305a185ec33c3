# ============================================================================
# LOCAL (IN-PROCESS) ADAPTERS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Adapters over a backend object living in this process
# PURPOSE: Embed Forge / Anvil as libraries without an HTTP hop
# CREATED: 18 SEP 2026
# ============================================================================
"""
Local Adapters

Selected with FORGE_ADAPTER=local / ANVIL_ADAPTER=local. The backend is
any object exposing the upstream operations as plain Python methods that
return raw dicts (the same shape the /v1 APIs return):

    Forge backend:
        get_sample(sample_id, tenant_id=None) -> dict
        get_artifacts(sample_id, tenant_id=None) -> list[dict]
        health_check() -> Any                       (optional)

    Anvil backend:
        get_next_assignment(queue_id, user_id, tenant_id=None) -> dict | None
        submit_label(payload: dict) -> dict
        get_queue_stats(queue_id, tenant_id=None) -> dict
        check_queue_access(user_id, queue_id) -> bool
        health_check() -> Any                       (optional)

The backend is named by FORGE_LOCAL_BACKEND / ANVIL_LOCAL_BACKEND as
"package.module:attribute"; a class is instantiated with no arguments.

Python exceptions raised by the backend map onto the error taxonomy:
    LookupError       not_found (no_assignments for next-assignment)
    TimeoutError      timeout
    ConnectionError   network
    PermissionError   unauthorized
    ValueError        validation (exc.errors mapping when present)
    anything else     unexpected
"""

import importlib
import inspect
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Type

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
from core.models import Artifact, Assignment, Label, QueueStats, Sample
from clients.base import QueueAdapter, SampleAdapter

logger = logging.getLogger(__name__)


def load_backend(reference: str) -> Any:
    """
    Resolve a "module:attribute" backend reference.

    Raises:
        ValueError: Malformed reference or missing attribute
        ImportError: Module cannot be imported
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Local backend must be 'module:attribute', got {reference!r}")

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module {module_name} has no attribute {attr}") from None

    if inspect.isclass(target):
        target = target()
    logger.info(f"Loaded local backend {reference} ({type(target).__name__})")
    return target


@contextmanager
def translate_errors(not_found: Type[ClientError] = NotFoundError):
    """Map backend exceptions onto ClientError subclasses."""
    try:
        yield
    except ClientError:
        raise
    except LookupError as e:
        raise not_found(str(e) or not_found.kind.value) from e
    except TimeoutError as e:
        raise UpstreamTimeoutError(str(e) or "backend timed out") from e
    except ConnectionError as e:
        raise NetworkError(str(e) or "backend unavailable") from e
    except PermissionError as e:
        raise UnauthorizedError(str(e) or "access denied") from e
    except ValueError as e:
        errors = getattr(e, "errors", None)
        if isinstance(errors, Mapping) and errors:
            raise ValidationError({str(k): str(v) for k, v in errors.items()}) from e
        raise ValidationError({"base": str(e)}) from e
    except Exception as e:
        logger.exception(f"Local backend raised {type(e).__name__}: {e}")
        raise UnexpectedError(f"{type(e).__name__}: {e}", detail=repr(e)) from e


def _backend_health(backend: Any) -> None:
    probe = getattr(backend, "health_check", None)
    if probe is None:
        return
    with translate_errors():
        result = probe()
    if result is False:
        raise NetworkError(f"{type(backend).__name__} reports unhealthy")


# ============================================================================
# FORGE
# ============================================================================

class LocalSampleAdapter(SampleAdapter):
    """Forge running in this process."""

    name = "local"

    def __init__(self, backend: Any):
        self.backend = backend

    def get_sample(self, sample_id: str, tenant_id: Optional[str] = None) -> Sample:
        with translate_errors():
            raw = self.backend.get_sample(sample_id, tenant_id=tenant_id)
        return Sample.from_raw(raw)

    def get_artifacts(self, sample_id: str, tenant_id: Optional[str] = None) -> List[Artifact]:
        with translate_errors():
            items = self.backend.get_artifacts(sample_id, tenant_id=tenant_id)
        if not isinstance(items, (list, tuple)):
            raise MalformedPayloadError(f"artifact list expected for sample {sample_id}")
        return [Artifact.from_raw(item) for item in items]

    def health_check(self) -> None:
        _backend_health(self.backend)


# ============================================================================
# ANVIL
# ============================================================================

class LocalQueueAdapter(QueueAdapter):
    """Anvil running in this process."""

    name = "local"

    def __init__(self, backend: Any, default_tenant_id: Optional[str] = None):
        self.backend = backend
        self.default_tenant_id = default_tenant_id

    def get_next_assignment(
        self,
        queue_id: str,
        user_id: str,
        tenant_id: Optional[str] = None,
    ) -> Assignment:
        with translate_errors(not_found=NoAssignmentsError):
            raw = self.backend.get_next_assignment(queue_id, user_id, tenant_id=tenant_id)
        if raw is None:
            raise NoAssignmentsError(f"Queue {queue_id} has no assignments")
        return Assignment.from_raw(raw)

    def submit_label(
        self,
        assignment_id: str,
        values: Dict[str, Any],
        user_id: Optional[str] = None,
        time_spent_ms: int = 0,
        tenant_id: Optional[str] = None,
    ) -> Label:
        payload: Dict[str, Any] = {
            "assignment_id": assignment_id,
            "values": dict(values),
            "time_spent_ms": time_spent_ms,
        }
        if user_id:
            payload["user_id"] = user_id
        tenant = tenant_id or self.default_tenant_id
        if tenant:
            payload["tenant_id"] = tenant

        with translate_errors():
            raw = self.backend.submit_label(payload)
        if not isinstance(raw, Mapping):
            raise MalformedPayloadError("label object expected from backend")
        return Label.from_raw({**payload, **raw})

    def get_queue_stats(self, queue_id: str, tenant_id: Optional[str] = None) -> QueueStats:
        with translate_errors():
            raw = self.backend.get_queue_stats(queue_id, tenant_id=tenant_id)
        if isinstance(raw, Mapping) and "queue_id" not in raw:
            raw = {"queue_id": queue_id, **raw}
        return QueueStats.from_raw(raw)

    def check_queue_access(self, user_id: str, queue_id: str) -> bool:
        with translate_errors():
            allowed = self.backend.check_queue_access(user_id, queue_id)
        return bool(allowed)

    def health_check(self) -> None:
        _backend_health(self.backend)


__all__ = [
    "LocalSampleAdapter",
    "LocalQueueAdapter",
    "load_backend",
    "translate_errors",
]
