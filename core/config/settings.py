# ============================================================================
# CLIENT CONFIGURATION
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Process-start configuration
# PURPOSE: Environment-based adapter selection and upstream endpoints
# CREATED: 15 SEP 2026
# ============================================================================
"""
Client Configuration

Loads configuration from environment variables with sensible defaults.
Adapter selection happens once at process start; with nothing set, both
upstreams use the mock adapter so the UI runs without Forge or Anvil.

Environment:
    FORGE_ADAPTER / ANVIL_ADAPTER   mock | http | local
    FORGE_URL / ANVIL_URL           Base URLs for the http adapters
    DEFAULT_TENANT_ID               Sent as x-tenant-id when set
    FORGE_LOCAL_BACKEND /
    ANVIL_LOCAL_BACKEND             "module:attribute" backends for the local adapters
    COMPONENT_PLUGIN_MODULES        Comma list of modules that register components
    MOCK_ERROR_RATE                 0.0-1.0 random failures for non-test ids
    CLIENT_* / BREAKER_*            See core.config.defaults
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.config.defaults import ResilienceDefaults, _env_float

logger = logging.getLogger(__name__)


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class ClientConfig:
    """Configuration for the upstream client facades."""

    # Adapter selection
    forge_adapter: str = "mock"
    anvil_adapter: str = "mock"

    # Upstream endpoints (http adapters)
    forge_url: str = "http://localhost:4102"
    anvil_url: str = "http://localhost:4101"
    default_tenant_id: Optional[str] = None

    # In-process backends (local adapters), "module:attribute"
    forge_local_backend: Optional[str] = None
    anvil_local_backend: Optional[str] = None

    # Resilience policy
    resilience: ResilienceDefaults = field(default_factory=ResilienceDefaults)

    # Component plugins imported at startup
    component_plugin_modules: List[str] = field(default_factory=list)

    # Mock adapters
    mock_error_rate: float = 0.0

    # App info
    service_name: str = "ingot"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables."""
        return cls(
            forge_adapter=os.environ.get("FORGE_ADAPTER", "mock").strip().lower() or "mock",
            anvil_adapter=os.environ.get("ANVIL_ADAPTER", "mock").strip().lower() or "mock",
            forge_url=os.environ.get("FORGE_URL") or "http://localhost:4102",
            anvil_url=os.environ.get("ANVIL_URL") or "http://localhost:4101",
            default_tenant_id=os.environ.get("DEFAULT_TENANT_ID") or None,
            forge_local_backend=os.environ.get("FORGE_LOCAL_BACKEND") or None,
            anvil_local_backend=os.environ.get("ANVIL_LOCAL_BACKEND") or None,
            resilience=ResilienceDefaults.from_env(),
            component_plugin_modules=_split_csv(os.environ.get("COMPONENT_PLUGIN_MODULES")),
            mock_error_rate=_env_float("MOCK_ERROR_RATE", 0.0),
            service_name=os.environ.get("SERVICE_NAME", "ingot"),
        )

    def adapter_for(self, upstream: str) -> str:
        """Configured adapter name for an upstream ("forge" / "anvil")."""
        if upstream == "forge":
            return self.forge_adapter
        if upstream == "anvil":
            return self.anvil_adapter
        raise ValueError(f"Unknown upstream: {upstream}")

    def url_for(self, upstream: str) -> str:
        if upstream == "forge":
            return self.forge_url
        if upstream == "anvil":
            return self.anvil_url
        raise ValueError(f"Unknown upstream: {upstream}")

    def local_backend_for(self, upstream: str) -> Optional[str]:
        if upstream == "forge":
            return self.forge_local_backend
        if upstream == "anvil":
            return self.anvil_local_backend
        raise ValueError(f"Unknown upstream: {upstream}")


# Global config singleton
_config: Optional[ClientConfig] = None


def get_config() -> ClientConfig:
    """Get the global configuration singleton."""
    global _config
    if _config is None:
        _config = ClientConfig.from_env()
        logger.debug(
            f"Loaded client config: forge={_config.forge_adapter} anvil={_config.anvil_adapter}"
        )
    return _config


def reset_config() -> None:
    """Drop the cached singleton (tests, config reload)."""
    global _config
    _config = None


__all__ = ["ClientConfig", "get_config", "reset_config"]
