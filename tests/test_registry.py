from __future__ import annotations

import dns.zone

from dnsplan.axfr import zone_to_records
from dnsplan.models import Changes
from dnsplan.plan import Plan
from dnsplan.registry import TxtRegistry, ownership_value, parse_ownership
from factories import make_record


def test_ownership_value_round_trip() -> None:
    value = ownership_value({"owner": "me", "resource": "ingress/web"})

    assert value == '"heritage=dnsplan,dnsplan/owner=me,dnsplan/resource=ingress/web"'
    assert parse_ownership(value) == {"owner": "me", "resource": "ingress/web"}


def test_parse_ownership_ignores_foreign_txt() -> None:
    assert parse_ownership('"v=spf1 -all"') is None
    assert parse_ownership("hello world") is None
    assert parse_ownership('"heritage=external-dns,external-dns/owner=me"') is None


def test_txt_names() -> None:
    registry = TxtRegistry("me", prefix="_own.")
    record = make_record("WWW.example.com", "1.1.1.1", record_type="CNAME")

    assert registry.owner_txt_name(record) == "_own.cname-www.example.com."
    assert registry.legacy_txt_name(record) == "_own.www.example.com."


def _raw_zone() -> list:
    return [
        make_record("www.example.com.", "1.1.1.1"),
        make_record("a-www.example.com.", '"heritage=dnsplan,dnsplan/owner=me"', record_type="TXT"),
        make_record("legacy.example.com.", "2.2.2.2"),
        make_record("legacy.example.com.", '"heritage=dnsplan,dnsplan/owner=me"', record_type="TXT"),
        make_record("other.example.com.", "3.3.3.3"),
        make_record("example.com.", '"v=spf1 -all"', record_type="TXT"),
    ]


def test_records_stamp_owner_labels() -> None:
    view = TxtRegistry("me").records(_raw_zone())

    owners = {(r.dns_name, r.record_type): r.owner() for r in view.records}
    assert owners == {
        ("www.example.com.", "A"): "me",
        ("legacy.example.com.", "A"): "me",
        ("other.example.com.", "A"): None,
        ("example.com.", "TXT"): None,
    }


def test_records_report_missing_new_format_txt() -> None:
    view = TxtRegistry("me").records(_raw_zone())

    assert [(r.dns_name, r.record_type, r.owner()) for r in view.missing] == [
        ("a-legacy.example.com.", "TXT", "me"),
    ]


def test_missing_txt_flows_into_plan_creates() -> None:
    view = TxtRegistry("me").records(_raw_zone())
    desired = [
        make_record("www.example.com.", "1.1.1.1", owner="me"),
        make_record("legacy.example.com.", "2.2.2.2", owner="me"),
    ]

    result = Plan(current=view.records, desired=desired, missing=view.missing, owner_id="me").calculate()

    assert result.changes.create == view.missing
    assert result.changes.delete == []


def test_generate_txt_records_pairs_companions() -> None:
    registry = TxtRegistry("me")
    old = make_record("m.example.com.", "1.1.1.1", owner="old")
    changes = Changes(
        create=[make_record("new.example.com.", "1.1.1.1", owner="me")],
        update_old=[old, make_record("u.example.com.", "1.1.1.1", owner="me")],
        update_new=[old.with_labels(owner="me"), make_record("u.example.com.", "2.2.2.2", owner="me")],
        delete=[make_record("gone.example.com.", "1.1.1.1", owner="me")],
    )

    result = registry.generate_txt_records(changes)

    assert [r.dns_name for r in result.create] == ["new.example.com.", "a-new.example.com."]
    assert [r.dns_name for r in result.delete] == ["gone.example.com.", "a-gone.example.com."]
    assert [r.dns_name for r in result.update_new] == ["m.example.com.", "u.example.com.", "a-m.example.com."]
    assert result.update_old[-1].targets == ('"heritage=dnsplan,dnsplan/owner=old"',)
    assert result.update_new[-1].targets == ('"heritage=dnsplan,dnsplan/owner=me"',)
    result.validate_pairing()
    assert len(changes.create) == 1


def test_ownership_txt_sharing_a_name_with_other_txt_values() -> None:
    zone = dns.zone.from_text(
        """
$TTL 300
@   IN SOA ns1.example.com. hostmaster.example.com. 1 3600 600 604800 86400
@   IN NS  ns1.example.com.
www IN A   192.0.2.1
www IN TXT "v=spf1 -all"
www IN TXT "heritage=dnsplan,dnsplan/owner=me"
""",
        origin="example.com.",
        relativize=False,
    )

    view = TxtRegistry("me").records(zone_to_records(zone))

    records = {(r.dns_name, r.record_type): r for r in view.records}
    assert records[("www.example.com.", "A")].owner() == "me"
    assert records[("www.example.com.", "TXT")].targets == ('"v=spf1 -all"',)
    assert records[("www.example.com.", "TXT")].owner() is None
    assert [r.dns_name for r in view.missing] == ["a-www.example.com."]
