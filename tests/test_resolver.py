from __future__ import annotations

import pytest

from dnsplan.models import PlanError
from dnsplan.resolver import PerResource
from factories import make_record


def test_resolve_create_picks_lowest_resource() -> None:
    candidates = [
        make_record("a.com.", "2.2.2.2", resource="svc/b"),
        make_record("a.com.", "1.1.1.1", resource="svc/a"),
        make_record("a.com.", "3.3.3.3", resource="svc/c"),
    ]

    assert PerResource().resolve_create(candidates) is candidates[1]


def test_resolve_create_is_stable_for_equal_resources() -> None:
    candidates = [make_record("a.com.", "2.2.2.2"), make_record("a.com.", "1.1.1.1")]

    assert PerResource().resolve_create(candidates) is candidates[0]
    assert PerResource().resolve_create(list(candidates)) is candidates[0]


def test_resolve_update_prefers_current_resource() -> None:
    current = make_record("a.com.", "1.1.1.1", resource="svc/z")
    candidates = [
        make_record("a.com.", "2.2.2.2", resource="svc/a"),
        make_record("a.com.", "3.3.3.3", resource="svc/z"),
    ]

    assert PerResource().resolve_update(current, candidates) is candidates[1]


def test_resolve_update_falls_back_to_create_rule() -> None:
    current = make_record("a.com.", "1.1.1.1", resource="svc/gone")
    candidates = [
        make_record("a.com.", "2.2.2.2", resource="svc/c"),
        make_record("a.com.", "3.3.3.3", resource="svc/b"),
    ]

    assert PerResource().resolve_update(current, candidates) is candidates[1]


def test_resolver_requires_candidates() -> None:
    with pytest.raises(PlanError):
        PerResource().resolve_create([])
    with pytest.raises(PlanError):
        PerResource().resolve_update(make_record("a.com.", "1.1.1.1"), [])
