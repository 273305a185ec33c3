# ============================================================================
# COMPONENT REGISTRY
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Components - Per-queue component resolution with caching
# PURPOSE: Map a queue id to its rendering component, falling back safely
# CREATED: 23 SEP 2026
# ============================================================================
"""
Component Registry

Resolution for a queue:

1. Cache hit -> return immediately, no upstream call.
2. Ask Anvil for the queue's next assignment (as the "component-registry"
   user) to read its metadata.
   - no_assignments -> default component (cached; an empty queue is not a
     resolution failure)
   - any other ClientError -> raised, nothing cached
3. No component name in the metadata -> default component.
4. Name not registered, or registered-then-rejected -> warning, default.
5. Otherwise the registered component.

The cache has no TTL. clear_cache(queue_id) drops one entry, clear_cache()
drops all (component redeploys, tests). Duplicate concurrent resolutions
of the same queue are harmless and not prevented.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from core.contracts import ClientError, NoAssignmentsError
from core.logging import log_context
from core.models import LabelSchema, Sample
from components.contracts import (
    Capability,
    ComponentError,
    ComponentNotFoundError,
    InvalidComponentError,
    RequiredAssets,
    verify_component,
)
from components.default import DefaultComponent
from components.table import ComponentTable, get_component_table

logger = logging.getLogger(__name__)

# Anvil user id used when peeking at a queue's metadata
RESOLVER_USER_ID = "component-registry"

DEFAULT_COMPONENT_NAME = "default"


@dataclass(frozen=True)
class ResolvedComponent:
    """
    Handle to a verified component.

    Optional capabilities are answered from the capability set recorded
    at registration, never by probing the component per call.
    """
    name: str
    component: Any
    capabilities: FrozenSet[Capability]
    is_default: bool = False

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def render_sample(self, sample: Sample, options: Optional[Mapping[str, Any]] = None) -> str:
        return self.component.render_sample(sample, options or {})

    def render_label_form(
        self,
        schema: LabelSchema,
        current_values: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        return self.component.render_label_form(schema, current_values or {}, options or {})

    def required_assets(self) -> RequiredAssets:
        return self.component.required_assets()

    def preprocess_sample(self, sample: Sample) -> Optional[Any]:
        """Derived data for the sample, or None if the component has no preprocessing."""
        if Capability.PREPROCESS_SAMPLE not in self.capabilities:
            return None
        return self.component.preprocess_sample(sample)

    def validate_label(self, values: Mapping[str, Any], schema: LabelSchema) -> Dict[str, Any]:
        """
        Domain validation beyond generic schema checks.

        Returns:
            The (possibly normalized) values

        Raises:
            ValidationError: field -> message map
        """
        if Capability.VALIDATE_LABEL not in self.capabilities:
            return dict(values)
        result = self.component.validate_label(values, schema)
        return dict(values) if result is None else dict(result)


class ComponentRegistry:
    """
    Resolves and caches the component for each queue.

    Args:
        queue_client: QueueClient used to read queue metadata
        table: Registration table (defaults to the process-wide table)
        default: Fallback component (defaults to DefaultComponent)
        tenant_id: Tenant passed through on metadata lookups
    """

    def __init__(
        self,
        queue_client,
        table: Optional[ComponentTable] = None,
        default: Optional[Any] = None,
        tenant_id: Optional[str] = None,
    ):
        self._queue_client = queue_client
        self._table = table if table is not None else get_component_table()
        self._tenant_id = tenant_id

        default = default or DefaultComponent()
        self._default = ResolvedComponent(
            name=DEFAULT_COMPONENT_NAME,
            component=default,
            capabilities=verify_component(DEFAULT_COMPONENT_NAME, default),
            is_default=True,
        )
        self._cache: Dict[str, ResolvedComponent] = {}

    @property
    def default(self) -> ResolvedComponent:
        return self._default

    def get_component(self, queue_id: str) -> ResolvedComponent:
        """
        Component for a queue.

        Raises:
            ClientError: Queue metadata could not be fetched (not cached)
        """
        cached = self._cache.get(queue_id)
        if cached is not None:
            return cached

        with log_context(queue_id=queue_id, operation="get_component"):
            resolved = self._resolve(queue_id)

        self._cache[queue_id] = resolved
        return resolved

    def load_component(self, name: str) -> ResolvedComponent:
        """
        Look up a registered component by name.

        Raises:
            ComponentNotFoundError: Nothing registered under name
            InvalidComponentError: Registration was attempted and rejected
        """
        entry = self._table.get(name)
        if entry is None:
            reason = self._table.rejection_reason(name)
            if reason:
                raise InvalidComponentError(name, reason)
            raise ComponentNotFoundError(name)
        return ResolvedComponent(
            name=entry.name,
            component=entry.component,
            capabilities=entry.capabilities,
        )

    def clear_cache(self, queue_id: Optional[str] = None) -> None:
        """Drop one cached queue, or every cached queue when queue_id is None."""
        if queue_id is None:
            count = len(self._cache)
            self._cache.clear()
            logger.info(f"Cleared component cache ({count} queues)")
        else:
            self._cache.pop(queue_id, None)
            logger.info(f"Cleared cached component for queue {queue_id}")

    def cached_queue_ids(self) -> List[str]:
        return sorted(self._cache)

    # ------------------------------------------------------------------
    # INTERNALS
    # ------------------------------------------------------------------

    def _resolve(self, queue_id: str) -> ResolvedComponent:
        try:
            assignment = self._queue_client.get_next_assignment(
                queue_id, RESOLVER_USER_ID, tenant_id=self._tenant_id
            )
        except NoAssignmentsError:
            logger.info(f"Queue {queue_id} has no assignments, using default component")
            return self._default
        except ClientError as e:
            logger.error(f"Failed to fetch queue {queue_id}: {e.kind.value}: {e.message}")
            raise

        name = assignment.component_module
        if not name:
            return self._default

        try:
            resolved = self.load_component(name)
        except ComponentError as e:
            logger.warning(
                f"Failed to load component {name} for queue {queue_id}: {e}. "
                f"Using default component."
            )
            return self._default

        logger.info(f"Loaded component {name} for queue {queue_id}")
        return resolved


__all__ = [
    "ComponentRegistry",
    "ResolvedComponent",
    "RESOLVER_USER_ID",
    "DEFAULT_COMPONENT_NAME",
]
