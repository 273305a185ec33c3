# ============================================================================
# UPSTREAM HEALTH CHECKS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Forge / Anvil reachability
# PURPOSE: Ping each upstream through its facade and report breaker state
# CREATED: 25 SEP 2026
# ============================================================================
"""
Upstream Health Checks

One instance per facade, registered by main.py:

    registry.register(UpstreamHealthCheck(forge_client))
    registry.register(UpstreamHealthCheck(anvil_client))

Results:
    healthy     health_check() answered, breaker closed
    degraded    breaker open (no ping is sent while it is)
    unhealthy   health_check() raised (timeout, network, unexpected, ...)

The ping goes through the facade, so a success while the breaker is
half-open serves as its probe.
"""

import asyncio
import logging

from core.contracts import BreakerState, CircuitOpenError, ClientError
from health.core import HealthCheckCategory, HealthCheckPlugin, HealthCheckResult

logger = logging.getLogger(__name__)


class UpstreamHealthCheck(HealthCheckPlugin):
    """Health of one upstream service behind a client facade."""

    category = HealthCheckCategory.UPSTREAM
    timeout_seconds = 6.0

    def __init__(self, client, required_for_ready: bool = True):
        self.client = client
        self.name = client.upstream.value
        self.required_for_ready = required_for_ready

    async def check(self) -> HealthCheckResult:
        breaker = self.client.breaker_state()
        if breaker is BreakerState.OPEN:
            snapshot = self.client.breaker.snapshot()
            return HealthCheckResult.degraded(
                message=f"Circuit open for {self.name}",
                breaker=snapshot,
            )

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.client.health_check)
        except CircuitOpenError as e:
            return HealthCheckResult.degraded(
                message=e.message,
                breaker=self.client.breaker.snapshot(),
            )
        except ClientError as e:
            logger.warning(f"Upstream {self.name} unhealthy: {e.kind.value}: {e.message}")
            return HealthCheckResult.unhealthy(
                message=e.message,
                error=e.kind.value,
                breaker=self.client.breaker.snapshot(),
            )

        return HealthCheckResult.healthy(
            message=f"{self.name} reachable",
            adapter=getattr(self.client.adapter, "name", type(self.client.adapter).__name__),
            breaker=self.client.breaker.snapshot(),
        )


__all__ = ["UpstreamHealthCheck"]
