# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Health check plugin system
# PURPOSE: Liveness, readiness and upstream breaker visibility
# CREATED: 24 SEP 2026
# ============================================================================
"""
Health Check Module

Plugin-based health checks for the client boundary:
- /livez: Process alive (instant, no upstream calls)
- /readyz: Required checks pass (config, Forge, Anvil)
- /health: Every check, including breaker snapshots and components

Architecture:
- HealthCheckPlugin: Base class for health checks
- HealthCheckRegistry: Registration by decorator or instance
- HealthCheckExecutor: Parallel execution with timeouts

Concrete checks live in health.checks and are imported by main.py, so
importing this package never pulls in the client facades.

Usage:
    from health import health_router, get_registry
    from health.checks import UpstreamHealthCheck

    get_registry().register(UpstreamHealthCheck(sample_client))
    app.include_router(health_router)
"""

from health.core import (
    HealthStatus,
    HealthCheckResult,
    HealthCheckPlugin,
    HealthCheckCategory,
)
from health.registry import (
    HealthCheckRegistry,
    register_check,
    get_registry,
)
from health.executor import HealthCheckExecutor
from health.router import health_router

__all__ = [
    # Core types
    "HealthStatus",
    "HealthCheckResult",
    "HealthCheckPlugin",
    "HealthCheckCategory",
    # Registry
    "HealthCheckRegistry",
    "register_check",
    "get_registry",
    # Executor
    "HealthCheckExecutor",
    # Router
    "health_router",
]
