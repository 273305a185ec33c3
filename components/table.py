# ============================================================================
# COMPONENT REGISTRATION TABLE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Components - Name -> verified component lookup
# PURPOSE: Register components at import time, look them up by name
# CREATED: 22 SEP 2026
# ============================================================================
"""
Component Registration Table

Queue metadata names a component by string. That string is looked up in
an explicit table filled at process start (plugin modules are imported
by load_plugin_modules and register themselves with the decorator),
never resolved by importing arbitrary module paths per request.

Design:
- Components are registered at import time via decorator
- Contract verification happens once, at registration
- Fail-fast on duplicate registration
- Rejected registrations are remembered so lookups can explain why
"""

import importlib
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, List, Optional, TypeVar

from components.contracts import (
    Capability,
    DuplicateComponentError,
    InvalidComponentError,
    verify_component,
)

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class ComponentEntry:
    """A verified, registered component."""
    name: str
    component: Any
    capabilities: FrozenSet[Capability]
    module: str
    registered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "class": type(self.component).__name__,
            "module": self.module,
            "capabilities": sorted(c.value for c in self.capabilities),
            "registered_at": self.registered_at.isoformat(),
        }


class ComponentTable:
    """Thread-safe name -> ComponentEntry map."""

    def __init__(self):
        self._entries: Dict[str, ComponentEntry] = {}
        self._rejected: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, name: str, component: Any) -> ComponentEntry:
        """
        Verify and register a component instance.

        Raises:
            DuplicateComponentError: Name already taken
            InvalidComponentError: Contract verification failed
        """
        with self._lock:
            if name in self._entries:
                raise DuplicateComponentError(name)
            try:
                capabilities = verify_component(name, component)
            except InvalidComponentError as e:
                self._rejected[name] = e.reason
                logger.warning(f"Rejected component {name}: {e.reason}")
                raise

            entry = ComponentEntry(
                name=name,
                component=component,
                capabilities=capabilities,
                module=type(component).__module__,
            )
            self._entries[name] = entry
            self._rejected.pop(name, None)

        logger.debug(
            f"Registered component: {name} ({entry.module}.{type(component).__name__}) "
            f"capabilities={sorted(c.value for c in capabilities)}"
        )
        return entry

    def reject(self, name: str, reason: str) -> None:
        """Remember a failed registration."""
        with self._lock:
            self._rejected[name] = reason
        logger.warning(f"Rejected component {name}: {reason}")

    def get(self, name: str) -> Optional[ComponentEntry]:
        return self._entries.get(name)

    def rejection_reason(self, name: str) -> Optional[str]:
        """Why a registration under this name failed (None if it never did)."""
        return self._rejected.get(name)

    def rejected(self) -> Dict[str, str]:
        """Rejected name -> reason."""
        with self._lock:
            return dict(self._rejected)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def describe(self) -> List[Dict[str, Any]]:
        return [self._entries[name].to_dict() for name in self.names()]

    def clear(self) -> None:
        """
        Clear all registered components.

        Primarily for testing.
        """
        with self._lock:
            self._entries.clear()
            self._rejected.clear()
        logger.debug("Cleared component table")

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# ============================================================================
# PROCESS-WIDE TABLE
# ============================================================================

_table = ComponentTable()


def get_component_table() -> ComponentTable:
    """The table plugin modules register into."""
    return _table


def register_component(name: str) -> Callable[[C], C]:
    """
    Decorator to register a component class (instantiated with no arguments).

    Example:
        @register_component("narrative_compare")
        class NarrativeCompare(Component):
            ...
    """
    def decorator(cls: C) -> C:
        try:
            instance = cls()
        except TypeError as e:
            # Abstract methods left unimplemented
            _table.reject(name, str(e))
            raise InvalidComponentError(name, str(e)) from e
        _table.register(name, instance)
        return cls

    return decorator


def register_component_instance(name: str, component: Any) -> ComponentEntry:
    """Register an already-constructed component."""
    return _table.register(name, component)


def list_components() -> List[Dict[str, Any]]:
    return _table.describe()


def clear_components() -> None:
    _table.clear()


def load_plugin_modules(modules: List[str]) -> int:
    """
    Import modules that register components.

    Import failures and rejected components are logged and skipped; a
    broken plugin degrades its queues to the default component instead
    of stopping the process.

    Returns:
        Number of modules imported
    """
    loaded = 0
    for module_name in modules:
        try:
            importlib.import_module(module_name)
            logger.info(f"Loaded component module: {module_name}")
            loaded += 1
        except ImportError as e:
            logger.warning(f"Failed to load component module {module_name}: {e}")
        except (InvalidComponentError, DuplicateComponentError) as e:
            logger.warning(f"Component module {module_name} not loaded: {e}")
        except Exception as e:
            logger.exception(f"Component module {module_name} raised during import: {e}")

    logger.info(f"Registered {len(_table)} components: {_table.names()}")
    return loaded


__all__ = [
    "ComponentEntry",
    "ComponentTable",
    "get_component_table",
    "register_component",
    "register_component_instance",
    "list_components",
    "clear_components",
    "load_plugin_modules",
]
