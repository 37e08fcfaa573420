"""Load and validate record YAML files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import ProviderSpecificProperty, Record, ValidationError


class RecordSpec(BaseModel):
    """Schema for a single record set."""

    name: str
    type: str
    targets: list[str] = Field(default_factory=list)
    value: str | None = Field(default=None, description="Shorthand for a single target")
    ttl: int | None = Field(default=None, ge=0)
    set_identifier: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    provider_specific: dict[str, str] = Field(default_factory=dict)

    @field_validator("type")
    @classmethod
    def _uppercase_type(cls, value: str) -> str:
        """Normalise RR type to uppercase."""
        return value.upper()

    @model_validator(mode="after")
    def _merge_value(self) -> RecordSpec:
        """Fold ``value`` into ``targets`` and require at least one target."""
        if self.value is not None:
            self.targets = [*self.targets, self.value]
            self.value = None
        if not self.targets:
            raise ValueError(f"record {self.name} {self.type} needs a value or targets")
        return self


class RecordSetSpec(BaseModel):
    """Schema for the YAML document."""

    zone: str | None = None
    records: list[RecordSpec] = Field(default_factory=list)


def _ensure_absolute(name: str) -> str:
    """Return an absolute DNS name."""
    stripped = name.strip()
    if stripped in {"", "@", "."}:
        return "."
    return stripped if stripped.endswith(".") else f"{stripped}."


def _normalise_owner(name: str, origin: str | None) -> str:
    """Normalise record owners relative to origin."""
    if origin is None:
        return _ensure_absolute(name)
    if name in {"", "@", "."}:
        return origin
    if name.endswith("."):
        return name
    trimmed_origin = origin.rstrip(".")
    return f"{name}.{trimmed_origin}."


def _render_yaml(path: Path, extra_context: dict[str, Any] | None = None) -> str:
    """Render a YAML file through Jinja2."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    context = {"env": os.environ}
    if extra_context:
        context.update(extra_context)
    return template.render(**context)


def parse_records(data: dict[str, Any]) -> list[Record]:
    """Validate already-parsed YAML data and turn it into records."""
    try:
        spec = RecordSetSpec(**data)
    except Exception as exc:  # noqa: BLE001
        raise ValidationError(f"YAML validation error: {exc}") from exc

    origin = _ensure_absolute(spec.zone) if spec.zone else None
    records: list[Record] = []
    for item in spec.records:
        records.append(
            Record(
                dns_name=_normalise_owner(item.name, origin),
                record_type=item.type,
                targets=item.targets,
                ttl=item.ttl,
                set_identifier=item.set_identifier,
                labels=item.labels,
                provider_specific=[
                    ProviderSpecificProperty(name=key, value=val) for key, val in item.provider_specific.items()
                ],
            )
        )
    return records


def load_records(path: Path, template_vars: dict[str, Any] | None = None) -> list[Record]:
    """Load a record YAML file (rendered through Jinja2) into records."""
    if not path.is_file():
        raise ValidationError(f"Record file {path} does not exist.")
    rendered = _render_yaml(path, template_vars)
    try:
        data = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as exc:  # noqa: BLE001
        raise ValidationError(f"Failed to parse YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must contain a mapping with a 'records' list.")
    return parse_records(data)
