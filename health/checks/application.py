# ============================================================================
# APPLICATION HEALTH CHECKS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Component table and cache state
# PURPOSE: Report registered / rejected rendering components
# CREATED: 25 SEP 2026
# ============================================================================
"""
Application Health Checks

Application-level checks (priority 40):
- ComponentsCheck: registered components, rejected registrations,
  queues with a cached component. Rejections degrade health (their
  queues are rendered with the default component) but never block
  readiness.
"""

import logging

from components import ComponentRegistry, ComponentTable
from health.core import HealthCheckCategory, HealthCheckPlugin, HealthCheckResult

logger = logging.getLogger(__name__)


class ComponentsCheck(HealthCheckPlugin):
    """Component table health."""

    name = "components"
    category = HealthCheckCategory.APPLICATION
    timeout_seconds = 1.0
    required_for_ready = False

    def __init__(self, table: ComponentTable, registry: ComponentRegistry):
        self.table = table
        self.registry = registry

    async def check(self) -> HealthCheckResult:
        rejected = self.table.rejected()
        details = {
            "registered": self.table.names(),
            "cached_queues": len(self.registry.cached_queue_ids()),
        }

        if rejected:
            return HealthCheckResult.degraded(
                message=f"{len(rejected)} component(s) rejected, their queues use the default",
                rejected=rejected,
                **details,
            )

        return HealthCheckResult.healthy(
            message=f"{len(details['registered'])} component(s) registered",
            **details,
        )


__all__ = ["ComponentsCheck"]
