# ============================================================================
# DEFAULT COMPONENT
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Components - Generic fallback renderer
# PURPOSE: Render any Sample / LabelSchema with zero configuration
# CREATED: 23 SEP 2026
# ============================================================================
"""
Default Component

Used when a queue names no component, names one that is not registered,
or names one that failed verification.

Sample:
    - sample id
    - artifacts (images inline, anything else as a link)
    - payload pretty-printed as JSON

Label form (one input per schema field, chosen by type tag):
    scale / rating   range input (min / max from the field)
    text             textarea
    boolean          checkbox
    select           select over field options
    anything else    text input

Rendering is pure: output depends only on the arguments, no I/O.
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined

from core.models import FieldType, LabelSchema, SchemaField, Sample
from components.contracts import Component, RequiredAssets

SAMPLE_TEMPLATE = """\
<div class="default-sample-display">
  <h3>Sample {{ sample.id }}</h3>
{%- if artifacts %}
  <div class="artifacts">
  {%- for artifact in artifacts %}
    {%- if artifact.is_image %}
    <img class="artifact-image" src="{{ artifact.url }}" alt="{{ artifact.filename }}" />
    {%- else %}
    <a class="artifact-link" href="{{ artifact.url }}">{{ artifact.filename }}</a>
    {%- endif %}
  {%- endfor %}
  </div>
{%- endif %}
  <pre class="sample-payload">{{ payload }}</pre>
</div>
"""

FORM_TEMPLATE = """\
<div class="default-label-form">
{%- for f in fields %}
  <div class="dimension">
    <label for="{{ f.id }}">{{ f.name }}{% if f.required %} *{% endif %}</label>
    {%- if f.widget == "range" %}
    <input type="range" id="{{ f.id }}" name="{{ f.input_name }}"
      {%- if f.min is not none %} min="{{ f.min }}"{% endif %}
      {%- if f.max is not none %} max="{{ f.max }}"{% endif %} value="{{ f.value }}" />
    {%- elif f.widget == "textarea" %}
    <textarea id="{{ f.id }}" name="{{ f.input_name }}">{{ f.value }}</textarea>
    {%- elif f.widget == "checkbox" %}
    <input type="checkbox" id="{{ f.id }}" name="{{ f.input_name }}" value="true"{% if f.value %} checked{% endif %} />
    {%- elif f.widget == "select" %}
    <select id="{{ f.id }}" name="{{ f.input_name }}">
      {%- for option in f.options %}
      <option value="{{ option.value }}"{% if option.selected %} selected{% endif %}>{{ option.value }}</option>
      {%- endfor %}
    </select>
    {%- else %}
    <input type="text" id="{{ f.id }}" name="{{ f.input_name }}" value="{{ f.value }}" />
    {%- endif %}
    {%- if f.help %}
    <small class="help">{{ f.help }}</small>
    {%- endif %}
    {%- if f.error %}
    <span class="field-error">{{ f.error }}</span>
    {%- endif %}
  </div>
{%- endfor %}
</div>
"""


def format_payload(payload: Any) -> str:
    """Pretty JSON; values JSON cannot encode fall back to str()."""
    return json.dumps(payload, indent=2, sort_keys=True, default=str, ensure_ascii=False)


def _widget_for(field: SchemaField) -> str:
    if field.type in FieldType.numeric():
        return "range"
    if field.type == FieldType.TEXT.value:
        return "textarea"
    if field.type == FieldType.BOOLEAN.value:
        return "checkbox"
    if field.type == FieldType.SELECT.value and field.options:
        return "select"
    return "text"


def _field_view(field: SchemaField, current_values: Mapping[str, Any], errors: Mapping[str, str]) -> Dict[str, Any]:
    widget = _widget_for(field)
    value = current_values.get(field.name, field.default)

    if widget == "checkbox":
        value = value is True or (isinstance(value, str) and value.lower() in ("true", "on", "1"))
    elif widget == "range" and value is None:
        value = field.min if field.min is not None else ""
    elif value is None:
        value = ""

    options: List[Dict[str, Any]] = []
    if widget == "select":
        options = [{"value": option, "selected": option == value} for option in field.options]

    return {
        "name": field.name,
        "id": f"label_data_{field.name}",
        "input_name": f"label_data[{field.name}]",
        "widget": widget,
        "value": value,
        "min": field.min,
        "max": field.max,
        "required": field.required,
        "help": field.help,
        "options": options,
        "error": errors.get(field.name),
    }


class DefaultComponent(Component):
    """Schema-driven renderer that works for any valid Sample / LabelSchema."""

    def __init__(self):
        self._env = Environment(
            loader=BaseLoader(),
            autoescape=True,
            undefined=StrictUndefined,
        )
        self._sample_template = self._env.from_string(SAMPLE_TEMPLATE)
        self._form_template = self._env.from_string(FORM_TEMPLATE)

    def render_sample(self, sample: Sample, options: Optional[Mapping[str, Any]] = None) -> str:
        return self._sample_template.render(
            sample=sample,
            artifacts=sample.artifacts,
            payload=format_payload(sample.payload),
        )

    def required_assets(self) -> RequiredAssets:
        return RequiredAssets()

    def render_label_form(
        self,
        schema: LabelSchema,
        current_values: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Options:
            errors: field name -> message, shown under the matching input
        """
        current_values = current_values or {}
        errors = (options or {}).get("errors") or {}
        fields = [_field_view(field, current_values, errors) for field in schema.fields]
        return self._form_template.render(fields=fields)


__all__ = ["DefaultComponent", "format_payload"]
