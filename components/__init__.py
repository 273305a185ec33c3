# ============================================================================
# COMPONENTS MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Components - Pluggable per-queue rendering
# PURPOSE: Contracts, registration table, resolver and default renderer
# CREATED: 22 SEP 2026
# ============================================================================
"""
Components Module

Usage:
    from components import ComponentRegistry

    registry = ComponentRegistry(queue_client)
    component = registry.get_component("queue-abc")
    html = component.render_sample(sample)
"""

from components.contracts import (
    Capability,
    Component,
    ComponentError,
    ComponentNotFoundError,
    DuplicateComponentError,
    InvalidComponentError,
    LabelFormRenderer,
    RequiredAssets,
    SampleRenderer,
    verify_component,
)
from components.table import (
    ComponentEntry,
    ComponentTable,
    clear_components,
    get_component_table,
    list_components,
    load_plugin_modules,
    register_component,
    register_component_instance,
)
from components.default import DefaultComponent
from components.registry import ComponentRegistry, ResolvedComponent

__all__ = [
    # Contracts
    "Capability",
    "Component",
    "RequiredAssets",
    "SampleRenderer",
    "LabelFormRenderer",
    "verify_component",
    # Errors
    "ComponentError",
    "ComponentNotFoundError",
    "DuplicateComponentError",
    "InvalidComponentError",
    # Table
    "ComponentEntry",
    "ComponentTable",
    "get_component_table",
    "register_component",
    "register_component_instance",
    "list_components",
    "clear_components",
    "load_plugin_modules",
    # Resolution
    "DefaultComponent",
    "ComponentRegistry",
    "ResolvedComponent",
]
