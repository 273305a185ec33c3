# ============================================================================
# ADAPTER SELECTION
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Name -> factory tables per upstream
# PURPOSE: Pick the concrete transport once, at process start
# CREATED: 18 SEP 2026
# ============================================================================
"""
Adapter Selection

FORGE_ADAPTER / ANVIL_ADAPTER name one entry of the tables below; unset
means "mock". An unknown name fails at startup with ValueError rather
than on the first request.
"""

import logging
from typing import Callable, Dict

from core.config import ClientConfig
from clients.base import QueueAdapter, SampleAdapter
from clients.adapters.http import HttpQueueAdapter, HttpSampleAdapter
from clients.adapters.local import LocalQueueAdapter, LocalSampleAdapter, load_backend
from clients.adapters.mock import MockQueueAdapter, MockSampleAdapter

logger = logging.getLogger(__name__)

SampleAdapterFactory = Callable[[ClientConfig], SampleAdapter]
QueueAdapterFactory = Callable[[ClientConfig], QueueAdapter]


def _require_backend(config: ClientConfig, upstream: str) -> str:
    reference = config.local_backend_for(upstream)
    if not reference:
        var = upstream.upper()
        raise ValueError(f"{var}_ADAPTER=local requires {var}_LOCAL_BACKEND (module:attribute)")
    return reference


SAMPLE_ADAPTERS: Dict[str, SampleAdapterFactory] = {
    "mock": lambda config: MockSampleAdapter(error_rate=config.mock_error_rate),
    "http": lambda config: HttpSampleAdapter(
        base_url=config.forge_url,
        timeout_seconds=config.resilience.timeout_seconds,
        default_tenant_id=config.default_tenant_id,
    ),
    "local": lambda config: LocalSampleAdapter(load_backend(_require_backend(config, "forge"))),
}

QUEUE_ADAPTERS: Dict[str, QueueAdapterFactory] = {
    "mock": lambda config: MockQueueAdapter(error_rate=config.mock_error_rate),
    "http": lambda config: HttpQueueAdapter(
        base_url=config.anvil_url,
        timeout_seconds=config.resilience.timeout_seconds,
        default_tenant_id=config.default_tenant_id,
    ),
    "local": lambda config: LocalQueueAdapter(
        load_backend(_require_backend(config, "anvil")),
        default_tenant_id=config.default_tenant_id,
    ),
}


def create_sample_adapter(config: ClientConfig) -> SampleAdapter:
    """Build the Forge adapter named by config.forge_adapter."""
    factory = SAMPLE_ADAPTERS.get(config.forge_adapter)
    if factory is None:
        raise ValueError(
            f"Unknown FORGE_ADAPTER {config.forge_adapter!r}, "
            f"expected one of {sorted(SAMPLE_ADAPTERS)}"
        )
    adapter = factory(config)
    logger.info(f"Forge adapter: {config.forge_adapter} ({type(adapter).__name__})")
    return adapter


def create_queue_adapter(config: ClientConfig) -> QueueAdapter:
    """Build the Anvil adapter named by config.anvil_adapter."""
    factory = QUEUE_ADAPTERS.get(config.anvil_adapter)
    if factory is None:
        raise ValueError(
            f"Unknown ANVIL_ADAPTER {config.anvil_adapter!r}, "
            f"expected one of {sorted(QUEUE_ADAPTERS)}"
        )
    adapter = factory(config)
    logger.info(f"Anvil adapter: {config.anvil_adapter} ({type(adapter).__name__})")
    return adapter


__all__ = [
    "SAMPLE_ADAPTERS",
    "QUEUE_ADAPTERS",
    "create_sample_adapter",
    "create_queue_adapter",
    "MockSampleAdapter",
    "MockQueueAdapter",
    "HttpSampleAdapter",
    "HttpQueueAdapter",
    "LocalSampleAdapter",
    "LocalQueueAdapter",
]
