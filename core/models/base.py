# ============================================================================
# DTO BASE MODEL
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Shared raw <-> DTO conversion
# PURPOSE: All-or-nothing construction of value objects from upstream data
# CREATED: 14 SEP 2026
# ============================================================================
"""
DTO Base Model

Value objects are frozen pydantic models. Construction from adapter-provided
raw data either yields a fully-populated object or raises
MalformedPayloadError; a partially-populated DTO is never returned.

to_raw() is the inverse of from_raw(): fields that were absent from the
raw payload stay absent, and timestamps are written back with the exact
text they were parsed from, so a well-formed payload round-trips unchanged.
"""

from datetime import datetime
from typing import Any, Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, PrivateAttr, model_serializer, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.contracts import MalformedPayloadError

T = TypeVar("T", bound="DTOModel")


class DTOModel(BaseModel):
    """Base for all UI-facing value objects."""

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "populate_by_name": True,
    }

    # field name -> ISO text the datetime was parsed from
    _timestamp_text: Dict[str, str] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_timestamp_text(cls, data: Any, handler):
        model = handler(data)
        if isinstance(data, Mapping):
            for name, field in cls.model_fields.items():
                if not isinstance(getattr(model, name, None), datetime):
                    continue
                text = data.get(field.alias) if field.alias else None
                if text is None:
                    text = data.get(name)
                if isinstance(text, str):
                    model._timestamp_text[name] = text
        return model

    @model_serializer(mode="wrap")
    def _restore_timestamp_text(self, handler, info) -> Dict[str, Any]:
        data = handler(self)
        if not info.mode_is_json() or not isinstance(data, dict):
            return data
        fields = type(self).model_fields
        for name, text in self._timestamp_text.items():
            alias = fields[name].alias
            key = alias if info.by_alias and alias else name
            if key in data:
                data[key] = text
        return data

    @classmethod
    def from_raw(cls: Type[T], raw: Any) -> T:
        """
        Build a DTO from raw upstream data.

        Raises:
            MalformedPayloadError: If raw is not a mapping or fails validation
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise MalformedPayloadError(
                f"{cls.__name__} expects an object, got {type(raw).__name__}"
            )
        try:
            return cls.model_validate(dict(raw))
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise MalformedPayloadError(f"{cls.__name__}: {problems}") from e

    def to_raw(self) -> Dict[str, Any]:
        """Serialize back to the raw JSON shape (aliases, unset fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


__all__ = ["DTOModel"]
