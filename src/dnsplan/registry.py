"""TXT based ownership registry.

Every managed record gets a companion TXT record holding its owner, e.g. for
``A www.example.com.`` owned by ``ops``::

    a-www.example.com. TXT "heritage=dnsplan,dnsplan/owner=ops"

Older deployments wrote the companion without the type prefix
(``www.example.com.``). Those are still read, and records only covered by the
old format are reported as ``missing`` so the plan backfills the new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .models import (
    OWNER_LABEL_KEY,
    RECORD_TYPE_TXT,
    RESOURCE_LABEL_KEY,
    Changes,
    Record,
    normalize_dns_name,
)

LOG = logging.getLogger("dnsplan.registry")

HERITAGE = "dnsplan"
_LABEL_PREFIX = f"{HERITAGE}/"


@dataclass
class RegistryView:
    """Records with ownership labels applied plus the TXT records to backfill."""

    records: list[Record] = field(default_factory=list)
    missing: list[Record] = field(default_factory=list)


def ownership_value(labels: dict[str, str]) -> str:
    """Serialise ownership labels into a quoted TXT value."""
    parts = [f"heritage={HERITAGE}"]
    for key in (OWNER_LABEL_KEY, RESOURCE_LABEL_KEY):
        if labels.get(key):
            parts.append(f"{_LABEL_PREFIX}{key}={labels[key]}")
    return '"' + ",".join(parts) + '"'


def parse_ownership(value: str) -> dict[str, str] | None:
    """Return the labels stored in a TXT value, or None if it is not one of ours."""
    text = value.strip().strip('"')
    labels: dict[str, str] = {}
    heritage = None
    for token in text.split(","):
        key, sep, val = token.partition("=")
        if not sep:
            return None
        if key == "heritage":
            heritage = val
        elif key.startswith(_LABEL_PREFIX):
            labels[key[len(_LABEL_PREFIX):]] = val
    if heritage != HERITAGE:
        return None
    return labels


class TxtRegistry:
    """Reads and writes ownership TXT records for one owner identity."""

    def __init__(self, owner_id: str, prefix: str = ""):
        self.owner_id = owner_id
        self.prefix = prefix

    def owner_txt_name(self, record: Record) -> str:
        return normalize_dns_name(f"{self.prefix}{record.record_type.lower()}-{record.dns_name}")

    def legacy_txt_name(self, record: Record) -> str:
        return normalize_dns_name(f"{self.prefix}{record.dns_name}")

    def _txt_for(self, record: Record, labels: dict[str, str]) -> Record:
        return Record(
            dns_name=self.owner_txt_name(record),
            record_type=RECORD_TYPE_TXT,
            targets=(ownership_value(labels),),
            set_identifier=record.set_identifier,
            labels=labels,
        )

    def records(self, raw: list[Record]) -> RegistryView:
        """Stamp ownership labels on ``raw`` and drop the ownership TXT records themselves."""
        owners: dict[tuple[str, str], dict[str, str]] = {}
        plain: list[Record] = []
        for record in raw:
            if record.record_type != RECORD_TYPE_TXT:
                plain.append(record)
                continue
            # one TXT record set may mix ownership values with unrelated ones
            others: list[str] = []
            for target in record.targets:
                labels = parse_ownership(target)
                if labels is None:
                    others.append(target)
                else:
                    owners[(normalize_dns_name(record.dns_name), record.set_identifier)] = labels
            if others:
                plain.append(replace(record, targets=others))

        view = RegistryView()
        for record in plain:
            labels = owners.get((self.owner_txt_name(record), record.set_identifier))
            # a legacy companion shares its name with TXT values living next to it
            if labels is None and record.record_type != RECORD_TYPE_TXT:
                labels = owners.get((self.legacy_txt_name(record), record.set_identifier))
                if labels is not None and labels.get(OWNER_LABEL_KEY) == self.owner_id:
                    LOG.debug("Record %s only has a legacy ownership record", record.dns_name)
                    view.missing.append(self._txt_for(record, labels))
            if labels:
                record = record.with_labels(**labels)
            view.records.append(record)
        return view

    def generate_txt_records(self, changes: Changes) -> Changes:
        """Return ``changes`` extended with the ownership TXT records they imply."""
        result = Changes(
            create=list(changes.create),
            update_old=list(changes.update_old),
            update_new=list(changes.update_new),
            delete=list(changes.delete),
        )
        for record in changes.create:
            if record.record_type != RECORD_TYPE_TXT:
                result.create.append(self._txt_for(record, self._labels(record)))
        for record in changes.delete:
            if record.record_type != RECORD_TYPE_TXT:
                result.delete.append(self._txt_for(record, self._labels(record)))
        for old, new in zip(changes.update_old, changes.update_new):
            if old.owner() != new.owner():
                result.update_old.append(self._txt_for(old, self._labels(old)))
                result.update_new.append(self._txt_for(new, self._labels(new)))
        return result

    def _labels(self, record: Record) -> dict[str, str]:
        labels = {OWNER_LABEL_KEY: record.owner() or self.owner_id}
        if record.resource():
            labels[RESOURCE_LABEL_KEY] = record.resource()
        return labels
