"""Core data models used by dnsplan."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, NamedTuple

OWNER_LABEL_KEY = "owner"
RESOURCE_LABEL_KEY = "resource"

RECORD_TYPE_A = "A"
RECORD_TYPE_AAAA = "AAAA"
RECORD_TYPE_CNAME = "CNAME"
RECORD_TYPE_TXT = "TXT"
RECORD_TYPE_MX = "MX"
RECORD_TYPE_NS = "NS"
RECORD_TYPE_SRV = "SRV"
RECORD_TYPE_PTR = "PTR"

DEFAULT_MANAGED_RECORDS: tuple[str, ...] = (RECORD_TYPE_A, RECORD_TYPE_AAAA, RECORD_TYPE_CNAME)


def normalize_dns_name(name: str) -> str:
    """Return the canonical form of a DNS name: trimmed, lower-cased, one trailing dot."""
    stripped = name.strip().lower()
    if not stripped.endswith("."):
        stripped += "."
    return stripped


class PlanKey(NamedTuple):
    """Identifies one row of the planning table."""

    dns_name: str
    set_identifier: str
    record_type: str


@dataclass(frozen=True)
class ProviderSpecificProperty:
    """A provider-defined name/value pair carried on a record."""

    name: str
    value: str


@dataclass(frozen=True)
class Record:
    """A named DNS record set with one or more targets."""

    dns_name: str
    record_type: str
    targets: tuple[str, ...] = ()
    ttl: int | None = None
    set_identifier: str = ""
    labels: Mapping[str, str] = field(default_factory=dict, hash=False)
    provider_specific: tuple[ProviderSpecificProperty, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "labels", dict(self.labels))
        object.__setattr__(self, "provider_specific", tuple(self.provider_specific))

    def ttl_configured(self) -> bool:
        """Return True when the record carries an explicit TTL (zero included)."""
        return self.ttl is not None

    def owner(self) -> str | None:
        """Return the owner identity label, if any."""
        return self.labels.get(OWNER_LABEL_KEY)

    def resource(self) -> str:
        """Return the resource label, empty when unset."""
        return self.labels.get(RESOURCE_LABEL_KEY, "")

    def get_provider_specific(self, name: str) -> ProviderSpecificProperty | None:
        """Return the provider-specific property called ``name``."""
        for prop in self.provider_specific:
            if prop.name == name:
                return prop
        return None

    def with_labels(self, **labels: str) -> Record:
        """Return a copy of the record with the given labels overridden."""
        merged = dict(self.labels)
        merged.update(labels)
        return replace(self, labels=merged)

    def key(self) -> PlanKey:
        """Return the planning key of this record."""
        return PlanKey(normalize_dns_name(self.dns_name), self.set_identifier, self.record_type)

    def __str__(self) -> str:
        targets = ";".join(self.targets)
        ttl = self.ttl if self.ttl_configured() else "-"
        return f"{self.dns_name} {ttl} IN {self.record_type} {self.set_identifier} {targets} {self.labels}"


def targets_same(left: Iterable[str], right: Iterable[str]) -> bool:
    """Return True when both target collections hold the same values, ignoring order."""
    return set(left) == set(right)


@dataclass
class Changes:
    """Actions needed to move current state towards desired state."""

    create: list[Record] = field(default_factory=list)
    update_old: list[Record] = field(default_factory=list)
    update_new: list[Record] = field(default_factory=list)
    delete: list[Record] = field(default_factory=list)

    def has_changes(self) -> bool:
        """Return True when the changes contain anything actionable."""
        if self.create or self.delete:
            return True
        return self.update_new != self.update_old

    def summary(self) -> dict[str, int]:
        """Return the number of entries per action."""
        return {
            "create": len(self.create),
            "update": len(self.update_new),
            "delete": len(self.delete),
        }

    def validate_pairing(self) -> None:
        """Raise PlanError unless update_old and update_new pair up by key."""
        if len(self.update_old) != len(self.update_new):
            raise PlanError(
                f"update lists differ in length: {len(self.update_old)} old vs {len(self.update_new)} new"
            )
        for old, new in zip(self.update_old, self.update_new):
            if old.key() != new.key():
                raise PlanError(f"update pair mismatch: {old.key()} vs {new.key()}")


class DnsPlanError(Exception):
    """Base exception for dnsplan."""


class PlanError(DnsPlanError):
    """Raised when a planning collaborator breaks its contract."""


class ValidationError(DnsPlanError):
    """Raised when a record file is invalid."""


class ConfigError(DnsPlanError):
    """Raised when the environment configuration is invalid."""


class ZoneFetchError(DnsPlanError):
    """Raised when AXFR download fails."""
