"""Compute the changes that converge current DNS records towards desired ones.

The planning table groups records by ``(name, set identifier, type)``:

    name    | current       | desired candidates          |
    --------+---------------+-----------------------------+------------------
    foo.com | -> 1.1.1.1    | [-> 1.1.1.1, -> elb.com]    | no action
    bar.com |               | [-> 191.1.1.1, -> 190.1.1.1]| create (resolver)
    baz.com | -> 1.2.3.4    | []                          | delete

Which candidate wins a contested row is up to the conflict resolver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Sequence

from .domain_filter import DomainFilterInterface, MatchAllDomainFilter
from .models import (
    DEFAULT_MANAGED_RECORDS,
    OWNER_LABEL_KEY,
    RECORD_TYPE_TXT,
    Changes,
    PlanError,
    PlanKey,
    Record,
    targets_same,
)
from .policy import Policy
from .resolver import ConflictResolver, PerResource

LOG = logging.getLogger("dnsplan.plan")

PropertyComparator = Callable[[str, str, str], bool]
"""Called as ``(name, previous, current)``; returns True when the values are equal enough."""

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass
class PlanTableRow:
    """The record occupying a name on the provider plus every record that wants it."""

    current: Record | None = None
    candidates: list[Record] = field(default_factory=list)


class PlanTable:
    """Rows of current and candidate records indexed by plan key."""

    def __init__(self, resolver: ConflictResolver):
        self.rows: dict[PlanKey, PlanTableRow] = {}
        self.resolver = resolver

    def _row(self, record: Record) -> PlanTableRow:
        key = record.key()
        if key not in self.rows:
            self.rows[key] = PlanTableRow()
        return self.rows[key]

    def add_current(self, record: Record) -> None:
        row = self._row(record)
        if row.current is not None:
            # providers are expected to report each key once; the later record wins
            LOG.warning(
                "Duplicate current record for %s, replacing %s with %s",
                record.key(),
                row.current,
                record,
            )
        row.current = record

    def add_candidate(self, record: Record) -> None:
        self._row(record).candidates.append(record)


@dataclass(frozen=True)
class Plan:
    """Desired and current records plus everything needed to diff them.

    ``calculate`` returns a new plan carrying the resulting changes; the
    receiving plan is left untouched.
    """

    current: Sequence[Record] = ()
    desired: Sequence[Record] = ()
    # created unconditionally, e.g. ownership records missing in an older format
    missing: Sequence[Record] = ()
    policies: Sequence[Policy] = ()
    changes: Changes | None = None
    domain_filter: DomainFilterInterface | None = None
    property_comparator: PropertyComparator | None = None
    managed_records: Sequence[str] = DEFAULT_MANAGED_RECORDS
    owner_id: str = ""
    owner_id_old: str = ""
    owner_migrate: bool = False
    has_migration: bool = False
    resolver: ConflictResolver = field(default_factory=PerResource)

    def calculate(self) -> Plan:
        """Compute the actions needed to move current state towards desired state."""
        domain_filter = self.domain_filter or MatchAllDomainFilter()
        table = PlanTable(self.resolver)

        for record in filter_records_for_plan(self.current, domain_filter, self.managed_records):
            table.add_current(record)
        for record in filter_records_for_plan(self.desired, domain_filter, self.managed_records):
            table.add_candidate(record)

        changes = Changes()
        has_migration = False

        for key in sorted(table.rows):
            row = table.rows[key]
            if row.current is None:
                changes.create.append(table.resolver.resolve_create(row.candidates))
                continue
            if not row.candidates:
                changes.delete.append(row.current)
                continue

            if self.owner_migrate and row.current.owner() == self.owner_id_old:
                has_migration = True
                update = row.current.with_labels(**{OWNER_LABEL_KEY: self.owner_id})
                LOG.info(
                    "Found record to migrate: name=%s type=%s previous_owner=%s new_owner=%s",
                    row.current.dns_name,
                    row.current.record_type,
                    self.owner_id_old,
                    self.owner_id,
                )
                changes.update_new.append(update)
                changes.update_old.append(row.current)
                continue

            update = table.resolver.resolve_update(row.current, row.candidates)
            if (
                should_update_ttl(update, row.current)
                or target_changed(update, row.current)
                or self.should_update_provider_specific(update, row.current)
            ):
                changes.update_new.append(inherit_owner(row.current, update))
                changes.update_old.append(row.current)

        for policy in self.policies:
            changes = policy.apply(changes)
        try:
            changes.validate_pairing()
        except PlanError as exc:
            LOG.error("Policies broke update pairing, keeping aligned pairs only: %s", exc)
            changes = aligned_updates(changes)

        if self.missing:
            managed = [*self.managed_records, RECORD_TYPE_TXT]
            changes.create.extend(filter_records_for_plan(self.missing, domain_filter, managed))

        owned = Changes(
            create=self._owned(changes.create),
            update_old=self._owned(changes.update_old),
            update_new=self._owned(changes.update_new),
            delete=self._owned(changes.delete),
        )
        LOG.info("Calculated plan: %s", owned.summary())

        return Plan(
            current=self.current,
            desired=self.desired,
            changes=owned,
            managed_records=DEFAULT_MANAGED_RECORDS,
            has_migration=has_migration,
        )

    def _owned(self, records: Sequence[Record]) -> list[Record]:
        return filter_owned_records(self.owner_id, self.owner_id_old, self.owner_migrate, records) or []

    def should_update_provider_specific(self, desired: Record, current: Record) -> bool:
        """Return True when a provider-specific property of ``current`` is not matched by ``desired``.

        Properties only present on ``desired`` never force an update.
        """
        for prop in current.provider_specific:
            match = desired.get_provider_specific(prop.name)
            wanted = match.value if match is not None else ""
            if self.property_comparator is not None:
                if not self.property_comparator(prop.name, prop.value, wanted):
                    return True
            elif prop.value != wanted:
                return True
        return False


def aligned_updates(changes: Changes) -> Changes:
    """Return ``changes`` with updates cut down to the leading pairs whose keys match."""
    pairs: list[tuple[Record, Record]] = []
    for old, new in zip(changes.update_old, changes.update_new):
        if old.key() != new.key():
            break
        pairs.append((old, new))
    return Changes(
        create=list(changes.create),
        update_old=[old for old, _ in pairs],
        update_new=[new for _, new in pairs],
        delete=list(changes.delete),
    )


def inherit_owner(source: Record, target: Record) -> Record:
    """Return ``target`` carrying the owner label of ``source``."""
    labels = dict(target.labels)
    owner = source.owner()
    if owner is None:
        labels.pop(OWNER_LABEL_KEY, None)
    else:
        labels[OWNER_LABEL_KEY] = owner
    return replace(target, labels=labels)


def target_changed(desired: Record, current: Record) -> bool:
    return not targets_same(desired.targets, current.targets)


def should_update_ttl(desired: Record, current: Record) -> bool:
    """An unconfigured desired TTL never forces an update."""
    if not desired.ttl_configured():
        return False
    return desired.ttl != current.ttl


def filter_owned_records(
    owner_id: str,
    owner_id_old: str,
    migrate: bool,
    records: Iterable[Record],
) -> list[Record] | None:
    """Keep records owned by ``owner_id`` (or ``owner_id_old`` while migrating).

    Returns None when nothing is left.
    """
    owners = {owner_id}
    if migrate:
        owners.add(owner_id_old)

    filtered: list[Record] = []
    for record in records:
        owner = record.owner()
        if owner is None or owner not in owners:
            LOG.debug(
                "Skipping record %s because owner id does not match, found: %r, required: %s",
                record,
                owner,
                sorted(owners),
            )
            continue
        filtered.append(record)

    return filtered or None


def filter_records_for_plan(
    records: Iterable[Record],
    domain_filter: DomainFilterInterface,
    managed_records: Sequence[str],
) -> list[Record]:
    """Drop records outside the domain filter or of unmanaged types.

    TXT records are normally unmanaged so that only the ownership registry
    touches them.
    """
    filtered: list[Record] = []
    for record in records:
        if not domain_filter.match(record.dns_name):
            LOG.debug("Ignoring record %s that does not match domain filter", record.dns_name)
            continue
        if is_managed_record(record.record_type, managed_records):
            filtered.append(record)
    return filtered


def is_managed_record(record_type: str, managed_records: Sequence[str]) -> bool:
    return record_type in managed_records


def parse_bool(value: str) -> bool:
    """Parse a boolean literal, raising ValueError for anything else."""
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal {value!r}")


def compare_boolean(default: bool, name: str, current: str, previous: str) -> bool:
    """Compare boolean-like property values such as ``proxied: "true"``.

    Empty or unparsable values count as ``default``.
    """

    def _value(raw: str) -> bool:
        if not raw:
            return default
        try:
            return parse_bool(raw)
        except ValueError:
            return default

    return _value(previous) == _value(current)


def boolean_comparator(default: bool = False, names: Iterable[str] | None = None) -> PropertyComparator:
    """Return a comparator applying boolean semantics.

    With ``names`` given, other properties fall back to string equality.
    """
    boolean_names = None if names is None else set(names)

    def _compare(name: str, previous: str, current: str) -> bool:
        if boolean_names is not None and name not in boolean_names:
            return previous == current
        return compare_boolean(default, name, current, previous)

    return _compare
