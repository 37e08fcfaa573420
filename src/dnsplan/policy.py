"""Policies post-processing the changes computed by a plan."""

from __future__ import annotations

from typing import Callable, Protocol

from .models import RECORD_TYPE_A, RECORD_TYPE_AAAA, Changes, ConfigError, Record


class Policy(Protocol):
    """Transforms a set of changes, e.g. to forbid deletions."""

    def apply(self, changes: Changes) -> Changes: ...


class SyncPolicy:
    """Allows every change."""

    def apply(self, changes: Changes) -> Changes:
        return changes


class UpsertOnlyPolicy:
    """Allows creates and updates, never deletes."""

    def apply(self, changes: Changes) -> Changes:
        return Changes(
            create=list(changes.create),
            update_old=list(changes.update_old),
            update_new=list(changes.update_new),
        )


class CreateOnlyPolicy:
    """Allows creates only."""

    def apply(self, changes: Changes) -> Changes:
        return Changes(create=list(changes.create))


class AddressOnlyPolicy:
    """Restricts every action to A and AAAA records.

    Update pairs are kept or dropped together so old/new stay aligned.
    """

    types = frozenset({RECORD_TYPE_A, RECORD_TYPE_AAAA})

    def _keep(self, record: Record) -> bool:
        return record.record_type in self.types

    def apply(self, changes: Changes) -> Changes:
        pairs = [
            (old, new)
            for old, new in zip(changes.update_old, changes.update_new)
            if self._keep(old) and self._keep(new)
        ]
        return Changes(
            create=[record for record in changes.create if self._keep(record)],
            update_old=[old for old, _ in pairs],
            update_new=[new for _, new in pairs],
            delete=[record for record in changes.delete if self._keep(record)],
        )


POLICIES: dict[str, Callable[[], Policy]] = {
    "sync": SyncPolicy,
    "upsert-only": UpsertOnlyPolicy,
    "create-only": CreateOnlyPolicy,
}


def policy_from_name(name: str) -> Policy:
    """Instantiate the policy registered under ``name``."""
    try:
        factory = POLICIES[name.strip().lower()]
    except KeyError as exc:
        choices = ", ".join(sorted(POLICIES))
        raise ConfigError(f"Unknown policy '{name}', expected one of: {choices}.") from exc
    return factory()
