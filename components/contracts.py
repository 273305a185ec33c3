# ============================================================================
# COMPONENT CONTRACTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Components - Renderer interfaces and capability descriptor
# PURPOSE: What a pluggable per-queue rendering component must provide
# CREATED: 22 SEP 2026
# ============================================================================
"""
Component Contracts

A component implements two cooperating interfaces:

    SampleRenderer
        render_sample(sample, options) -> str           (required)
        required_assets() -> RequiredAssets             (required)
        preprocess_sample(sample) -> Any                (optional capability)

    LabelFormRenderer
        render_label_form(schema, current_values, options) -> str   (required)
        validate_label(values, schema) -> values        (optional capability)
                                                        raises ValidationError

Optional methods are declared up front in `capabilities` and verified
once when the component is registered; callers never probe for them.

Example:
    @register_component("narrative_compare")
    class NarrativeCompare(Component):
        capabilities = frozenset({Capability.VALIDATE_LABEL})

        def render_sample(self, sample, options=None): ...
        def required_assets(self): return RequiredAssets(css=["/assets/narratives.css"])
        def render_label_form(self, schema, current_values, options=None): ...
        def validate_label(self, values, schema): ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from core.models import LabelSchema, Sample


# ============================================================================
# TYPES
# ============================================================================

class Capability(str, Enum):
    """Optional component functions."""
    PREPROCESS_SAMPLE = "preprocess_sample"
    VALIDATE_LABEL = "validate_label"


@dataclass(frozen=True)
class RequiredAssets:
    """Static assets a component needs on the page."""
    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"css": list(self.css), "js": list(self.js), "hooks": list(self.hooks)}


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ComponentError(Exception):
    """Base exception for component registration and lookup."""
    pass


class ComponentNotFoundError(ComponentError):
    """Raised when no component is registered under a name."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Component not registered: {name}")


class DuplicateComponentError(ComponentError):
    """Raised when a component name is already registered."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Component already registered: {name}")


class InvalidComponentError(ComponentError):
    """Raised when an object does not satisfy the component contracts."""
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid component {name}: {reason}")


# ============================================================================
# INTERFACES
# ============================================================================

class SampleRenderer(ABC):
    """Renders a sample for the labeling page."""

    @abstractmethod
    def render_sample(self, sample: Sample, options: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render sample content as HTML.

        Options (all optional):
            mode: "labeling" | "review" | "audit"
            highlight: artifact ids to emphasize
            preprocessed: result of preprocess_sample()
        """

    @abstractmethod
    def required_assets(self) -> RequiredAssets:
        """CSS / JS / hook names to include while this component is active."""


class LabelFormRenderer(ABC):
    """Renders the label input form for a schema."""

    @abstractmethod
    def render_label_form(
        self,
        schema: LabelSchema,
        current_values: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render form inputs for every schema field, pre-filled from current_values."""


class Component(SampleRenderer, LabelFormRenderer):
    """Convenience base implementing both interfaces."""

    capabilities: FrozenSet[Capability] = frozenset()


# ============================================================================
# VERIFICATION
# ============================================================================

def verify_component(name: str, component: Any) -> FrozenSet[Capability]:
    """
    Check an object against both contracts and its declared capabilities.

    Returns:
        The verified capability set

    Raises:
        InvalidComponentError: Missing interface or undeclared/unimplemented capability
    """
    missing = []
    if not isinstance(component, SampleRenderer):
        missing.append("SampleRenderer")
    if not isinstance(component, LabelFormRenderer):
        missing.append("LabelFormRenderer")
    if missing:
        raise InvalidComponentError(name, f"does not implement {' and '.join(missing)}")

    declared = getattr(component, "capabilities", frozenset())
    try:
        capabilities = frozenset(Capability(c) for c in declared)
    except (TypeError, ValueError) as e:
        raise InvalidComponentError(name, f"unknown capability in {declared!r}: {e}") from None

    for capability in capabilities:
        if not callable(getattr(component, capability.value, None)):
            raise InvalidComponentError(
                name, f"declares {capability.value} but does not implement it"
            )
    return capabilities


__all__ = [
    "Capability",
    "RequiredAssets",
    "SampleRenderer",
    "LabelFormRenderer",
    "Component",
    "ComponentError",
    "ComponentNotFoundError",
    "DuplicateComponentError",
    "InvalidComponentError",
    "verify_component",
]
