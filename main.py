# ============================================================================
# INGOT CLIENT BOUNDARY - MAIN APPLICATION
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - FastAPI application entry point
# PURPOSE: Wire config, client facades, components and health checks
# CREATED: 26 SEP 2026
# ============================================================================
"""
Ingot Client Boundary Main Application

Process-start wiring:
1. Configure logging (LOG_LEVEL, LOG_FORMAT)
2. Load ClientConfig from the environment
3. Build the Forge / Anvil facades (adapter chosen by config)
4. Import component plugin modules and build the ComponentRegistry
5. Register health checks and mount the health router

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE, EPOCH, CODENAME
from core.config import ClientConfig, get_config
from core.logging import configure_logging, get_logger
from clients import QueueClient, SampleClient
from components import ComponentRegistry, get_component_table, list_components, load_plugin_modules
from health import get_registry, health_router
from health.checks import ComponentsCheck, UpstreamHealthCheck

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


@dataclass
class Services:
    """Objects built at process start and shared by request handlers."""
    config: ClientConfig
    samples: SampleClient
    queues: QueueClient
    components: ComponentRegistry

    def close(self) -> None:
        self.samples.close()
        self.queues.close()


def build_services(config: Optional[ClientConfig] = None) -> Services:
    """
    Build facades and the component registry, and register health checks.

    Raises:
        ValueError: Unknown adapter name or missing local backend
    """
    config = config or get_config()

    samples = SampleClient.from_config(config)
    queues = QueueClient.from_config(config)

    loaded = load_plugin_modules(config.component_plugin_modules)
    logger.info(f"Imported {loaded}/{len(config.component_plugin_modules)} component plugin modules")

    table = get_component_table()
    components = ComponentRegistry(queues, table=table, tenant_id=config.default_tenant_id)

    registry = get_registry()
    registry.register(UpstreamHealthCheck(samples))
    registry.register(UpstreamHealthCheck(queues))
    registry.register(ComponentsCheck(table, components))
    logger.info(f"Health checks initialized ({len(registry)} checks registered)")

    return Services(config=config, samples=samples, queues=queues, components=components)


_services: Optional[Services] = None


def get_services() -> Services:
    """Services built by the lifespan handler."""
    if _services is None:
        raise RuntimeError("Services not initialized (application not started)")
    return _services


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds the client boundary on startup, closes the facades on shutdown.
    """
    global _services

    logger.info(f"Starting Ingot client boundary v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")
    _services = build_services()
    logger.info(
        f"Adapters: forge={_services.config.forge_adapter} anvil={_services.config.anvil_adapter}"
    )

    yield

    logger.info("Shutting down Ingot client boundary...")
    _services.close()
    _services = None
    logger.info("Ingot client boundary stopped")


app = FastAPI(
    title="Ingot Client Boundary",
    description=f"Epoch {EPOCH} ({CODENAME}): resilient Forge / Anvil clients and rendering components",
    version=__version__,
    lifespan=lifespan,
)

# Health check routes (no prefix - /livez, /readyz, /health)
app.include_router(health_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Ingot Client Boundary",
        "version": __version__,
        "epoch": EPOCH,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/components")
async def components():
    """Registered components and the queues whose component is cached."""
    services = get_services()
    table = get_component_table()
    return {
        "components": list_components(),
        "rejected": table.rejected(),
        "cached_queues": services.components.cached_queue_ids(),
        "breakers": {
            "forge": services.samples.breaker.snapshot(),
            "anvil": services.queues.breaker.snapshot(),
        },
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
