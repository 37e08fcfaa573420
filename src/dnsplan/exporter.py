"""Utilities to serialise records and changes into declarative formats."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import yaml

from .models import Changes, Record


def record_to_dict(record: Record) -> dict[str, Any]:
    """Convert a record into a serialisable dictionary."""
    entry: dict[str, Any] = {
        "name": record.dns_name,
        "type": record.record_type,
        "targets": list(record.targets),
    }
    if record.ttl_configured():
        entry["ttl"] = record.ttl
    if record.set_identifier:
        entry["set_identifier"] = record.set_identifier
    if record.labels:
        entry["labels"] = dict(record.labels)
    if record.provider_specific:
        entry["provider_specific"] = {prop.name: prop.value for prop in record.provider_specific}
    return entry


def records_to_dict(records: Iterable[Record]) -> dict[str, Any]:
    """Create a document loadable by ``yaml_loader.load_records``."""
    ordered = sorted(records, key=lambda rec: (rec.key(), rec.targets))
    return {"records": [record_to_dict(record) for record in ordered]}


def changes_to_dict(changes: Changes) -> dict[str, Any]:
    """Create a dictionary describing the changes."""
    return {
        "create": [record_to_dict(r) for r in changes.create],
        "update": [
            {"old": record_to_dict(old), "new": record_to_dict(new)}
            for old, new in zip(changes.update_old, changes.update_new)
        ],
        "delete": [record_to_dict(r) for r in changes.delete],
    }


def changes_to_yaml(changes: Changes) -> str:
    """Return YAML representation of the changes."""
    return yaml.safe_dump(changes_to_dict(changes), sort_keys=False)


def changes_to_json(changes: Changes) -> str:
    """Return JSON representation of the changes."""
    return json.dumps(changes_to_dict(changes), indent=2)


def records_to_yaml(records: Iterable[Record]) -> str:
    """Return YAML representation of a record list."""
    return yaml.safe_dump(records_to_dict(records), sort_keys=False)


def write_output(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
