"""Conflict resolution between desired records competing for one name."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import PlanError, Record


class ConflictResolver(Protocol):
    """Picks a single desired record out of the candidates for a plan row.

    Implementations must be deterministic for a given input, otherwise the
    plan would flip between candidates on every reconciliation.
    """

    def resolve_create(self, candidates: Sequence[Record]) -> Record: ...

    def resolve_update(self, current: Record, candidates: Sequence[Record]) -> Record: ...


class PerResource:
    """Resolve conflicts by the resource label of each candidate.

    Creates go to the candidate with the lowest resource label. Updates keep
    the record with the resource already owning the name when it is still
    among the candidates.
    """

    def resolve_create(self, candidates: Sequence[Record]) -> Record:
        if not candidates:
            raise PlanError("cannot resolve a create without candidates")
        # min() keeps the first of equal resources
        return min(candidates, key=lambda record: record.resource())

    def resolve_update(self, current: Record, candidates: Sequence[Record]) -> Record:
        if not candidates:
            raise PlanError(f"cannot resolve an update of {current.dns_name} without candidates")
        for candidate in candidates:
            if candidate.resource() == current.resource():
                return candidate
        return self.resolve_create(candidates)
