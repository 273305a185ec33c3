# ============================================================================
# HEALTH CHECK PLUGINS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Health check implementations
# PURPOSE: Concrete checks for configuration, upstreams and components
# CREATED: 24 SEP 2026
# ============================================================================
"""
Health Check Plugins

Startup Checks (priority 10, registered on import):
- process: Basic process health
- config: Adapter selection consistent

Upstream Checks (priority 20, registered by main.py per facade):
- forge / anvil: UpstreamHealthCheck

Application Checks (priority 40, registered by main.py):
- components: ComponentsCheck
"""

from health.checks.startup import ProcessCheck, ConfigCheck
from health.checks.upstream import UpstreamHealthCheck
from health.checks.application import ComponentsCheck

__all__ = [
    "ProcessCheck",
    "ConfigCheck",
    "UpstreamHealthCheck",
    "ComponentsCheck",
]
