# ============================================================================
# LABEL SCHEMA MODELS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Label form schema value objects
# PURPOSE: Typed field descriptors and generic value validation
# CREATED: 14 SEP 2026
# ============================================================================
"""
Label Schema Models

A LabelSchema is a named, typed list of input fields attached to an
assignment. It is versioned upstream (Anvil), not here.

Field type tags understood by generic validation and the default
component:
    scale / rating   numeric, bounded by min/max
    boolean          true/false
    text             free text
    select           one of `options`
Any other tag is treated as free text.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import Field, StrictFloat, StrictInt

from core.models.base import DTOModel

Number = Union[StrictInt, StrictFloat]


class FieldType(str, Enum):
    """Field type tags with dedicated handling."""
    SCALE = "scale"
    RATING = "rating"
    BOOLEAN = "boolean"
    TEXT = "text"
    SELECT = "select"

    @classmethod
    def numeric(cls) -> frozenset:
        return frozenset({cls.SCALE.value, cls.RATING.value})


class SchemaField(DTOModel):
    """Descriptor for one label input."""

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="scale | rating | text | boolean | select | ...")
    required: bool = False
    min: Optional[Number] = None
    max: Optional[Number] = None
    default: Any = None
    options: Optional[List[Any]] = None
    help: Optional[str] = None

    @property
    def is_numeric(self) -> bool:
        return self.type in FieldType.numeric()

    def check(self, value: Any) -> Optional[str]:
        """Return an error message for value, or None if acceptable."""
        if value is None or value == "":
            return "is required" if self.required else None

        if self.is_numeric:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return "must be a number"
            if self.min is not None and value < self.min:
                return f"must be at least {self.min}"
            if self.max is not None and value > self.max:
                return f"must be at most {self.max}"
        elif self.type == FieldType.BOOLEAN.value:
            if not isinstance(value, bool):
                return "must be true or false"
        elif self.options:
            if value not in self.options:
                return "is not one of the allowed options"
        return None


class LabelSchema(DTOModel):
    """Typed list of input fields plus an optional rendering component reference."""

    id: Optional[str] = None
    fields: List[SchemaField] = Field(default_factory=list)
    layout: Optional[Dict[str, Any]] = None
    component_module: Optional[str] = Field(
        None, description="Registered component name used to render this schema"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tenant_id: Optional[str] = None
    namespace: Optional[str] = None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def required_fields(self) -> List[SchemaField]:
        return [f for f in self.fields if f.required]

    def get_field(self, name: str) -> Optional[SchemaField]:
        for item in self.fields:
            if item.name == name:
                return item
        return None

    def validate_values(self, values: Mapping[str, Any]) -> Dict[str, str]:
        """
        Generic schema checks for submitted values.

        Returns:
            field name -> message map (empty when values are acceptable)
        """
        errors: Dict[str, str] = {}
        for item in self.fields:
            message = item.check(values.get(item.name))
            if message:
                errors[item.name] = message
        return errors


__all__ = ["FieldType", "SchemaField", "LabelSchema"]
