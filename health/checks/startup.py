# ============================================================================
# STARTUP HEALTH CHECKS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Startup health checks
# PURPOSE: Basic process and configuration checks
# CREATED: 24 SEP 2026
# ============================================================================
"""
Startup Health Checks

Basic checks that run first (priority 10):
- ProcessCheck: Always healthy if process is running
- ConfigCheck: Adapter selection is complete and consistent
"""

import os
import platform
import sys
import logging
from typing import List

from core.config import get_config
from health.core import HealthCheckPlugin, HealthCheckResult
from health.registry import register_check

logger = logging.getLogger(__name__)

KNOWN_ADAPTERS = ("mock", "http", "local")


@register_check(category="startup")
class ProcessCheck(HealthCheckPlugin):
    """Always healthy if the check runs (proves the event loop is alive)."""

    name = "process"
    timeout_seconds = 1.0

    async def check(self) -> HealthCheckResult:
        return HealthCheckResult.healthy(
            message="Process running",
            python_version=sys.version.split()[0],
            platform=platform.platform(),
            pid=os.getpid(),
        )


@register_check(category="startup")
class ConfigCheck(HealthCheckPlugin):
    """
    Configuration health check.

    Unhealthy when an adapter name is unknown or a local adapter has no
    backend; degraded when the mock adapters inject random failures.
    """

    name = "config"
    timeout_seconds = 1.0

    async def check(self) -> HealthCheckResult:
        config = get_config()
        problems: List[str] = []

        for upstream in ("forge", "anvil"):
            adapter = config.adapter_for(upstream)
            if adapter not in KNOWN_ADAPTERS:
                problems.append(f"{upstream.upper()}_ADAPTER={adapter!r} is not one of {KNOWN_ADAPTERS}")
            elif adapter == "local" and not config.local_backend_for(upstream):
                problems.append(f"{upstream.upper()}_LOCAL_BACKEND is required for the local adapter")

        adapters = {"forge": config.forge_adapter, "anvil": config.anvil_adapter}

        if problems:
            return HealthCheckResult.unhealthy(
                message="; ".join(problems),
                adapters=adapters,
            )

        if config.mock_error_rate > 0 and "mock" in adapters.values():
            return HealthCheckResult.degraded(
                message=f"Mock adapters inject failures (MOCK_ERROR_RATE={config.mock_error_rate})",
                adapters=adapters,
            )

        return HealthCheckResult.healthy(message="Configuration valid", adapters=adapters)


__all__ = ["ProcessCheck", "ConfigCheck"]
