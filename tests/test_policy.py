from __future__ import annotations

import pytest

from dnsplan.models import Changes, ConfigError
from dnsplan.policy import (
    AddressOnlyPolicy,
    CreateOnlyPolicy,
    SyncPolicy,
    UpsertOnlyPolicy,
    policy_from_name,
)
from factories import make_record


@pytest.fixture
def changes() -> Changes:
    return Changes(
        create=[make_record("new.com.", "1.1.1.1"), make_record("alias.com.", "x.com.", record_type="CNAME")],
        update_old=[
            make_record("a.com.", "1.1.1.1"),
            make_record("c.com.", "old.com.", record_type="CNAME"),
            make_record("six.com.", "::1", record_type="AAAA"),
        ],
        update_new=[
            make_record("a.com.", "2.2.2.2"),
            make_record("c.com.", "new.com.", record_type="CNAME"),
            make_record("six.com.", "::2", record_type="AAAA"),
        ],
        delete=[make_record("gone.com.", "1.1.1.1")],
    )


def test_sync_policy_keeps_everything(changes: Changes) -> None:
    assert SyncPolicy().apply(changes) == changes


def test_upsert_only_drops_deletes(changes: Changes) -> None:
    result = UpsertOnlyPolicy().apply(changes)

    assert result.delete == []
    assert result.create == changes.create
    assert result.update_new == changes.update_new


def test_create_only_keeps_creates(changes: Changes) -> None:
    assert CreateOnlyPolicy().apply(changes) == Changes(create=changes.create)


def test_address_only_keeps_update_pairs_aligned(changes: Changes) -> None:
    result = AddressOnlyPolicy().apply(changes)

    assert [r.dns_name for r in result.create] == ["new.com."]
    assert [r.dns_name for r in result.update_old] == ["a.com.", "six.com."]
    assert [r.dns_name for r in result.update_new] == ["a.com.", "six.com."]
    assert result.delete == changes.delete
    result.validate_pairing()


def test_policy_from_name() -> None:
    assert isinstance(policy_from_name("upsert-only"), UpsertOnlyPolicy)
    assert isinstance(policy_from_name(" Sync "), SyncPolicy)


def test_policy_from_name_rejects_unknown() -> None:
    with pytest.raises(ConfigError, match="Unknown policy"):
        policy_from_name("delete-everything")
