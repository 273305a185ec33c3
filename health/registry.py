# ============================================================================
# HEALTH CHECK REGISTRY
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Health check plugin registration
# PURPOSE: Register and discover health check plugins
# CREATED: 24 SEP 2026
# ============================================================================
"""
Health Check Registry

Upstream checks need the client facades, so main.py registers instances
once the clients exist:

    registry = get_registry()
    registry.register(UpstreamHealthCheck(forge))

Stateless checks can use the decorator instead:

    @register_check(category="startup")
    class ConfigCheck(HealthCheckPlugin):
        ...
"""

import logging
from typing import Dict, List, Optional, Type, Union

from health.core import HealthCheckCategory, HealthCheckPlugin

logger = logging.getLogger(__name__)


class HealthCheckRegistry:
    """Registry for health check plugins, keyed by name."""

    def __init__(self):
        self._checks: Dict[str, HealthCheckPlugin] = {}

    def register(self, check: HealthCheckPlugin) -> HealthCheckPlugin:
        """Register a plugin instance (a same-named check is replaced)."""
        if check.name in self._checks:
            logger.warning(f"Overwriting health check: {check.name}")

        self._checks[check.name] = check
        logger.debug(
            f"Registered health check: {check.name} "
            f"(category={check.category.value}, priority={check.priority})"
        )
        return check

    def unregister(self, name: str) -> bool:
        return self._checks.pop(name, None) is not None

    def get(self, name: str) -> Optional[HealthCheckPlugin]:
        return self._checks.get(name)

    def get_checks_by_priority(self) -> List[HealthCheckPlugin]:
        """All checks sorted by priority (lower first)."""
        return sorted(self._checks.values(), key=lambda c: c.priority)

    def get_required_checks(self) -> List[HealthCheckPlugin]:
        """Checks required for /readyz."""
        return [c for c in self.get_checks_by_priority() if c.required_for_ready]

    def clear(self) -> None:
        self._checks.clear()

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, name: str) -> bool:
        return name in self._checks


# ============================================================================
# GLOBAL REGISTRY & DECORATOR
# ============================================================================

_registry: Optional[HealthCheckRegistry] = None


def get_registry() -> HealthCheckRegistry:
    """Get the global health check registry."""
    global _registry
    if _registry is None:
        _registry = HealthCheckRegistry()
    return _registry


def register_check(
    category: Union[str, HealthCheckCategory, None] = None,
    priority: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
    required_for_ready: Optional[bool] = None,
):
    """
    Decorator to register a health check class (instantiated with no arguments).

    Args:
        category: Override category (string or HealthCheckCategory)
        priority: Override priority (lower runs first)
        timeout_seconds: Override timeout
        required_for_ready: Override if required for /readyz
    """
    def decorator(cls: Type[HealthCheckPlugin]) -> Type[HealthCheckPlugin]:
        if category is not None:
            cls.category = HealthCheckCategory(category)
            if priority is None:
                cls.priority = cls.category.default_priority
        if priority is not None:
            cls.priority = priority
        if timeout_seconds is not None:
            cls.timeout_seconds = timeout_seconds
        if required_for_ready is not None:
            cls.required_for_ready = required_for_ready

        get_registry().register(cls())
        return cls

    return decorator


__all__ = [
    "HealthCheckRegistry",
    "get_registry",
    "register_check",
]
