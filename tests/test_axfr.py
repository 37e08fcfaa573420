from __future__ import annotations

import dns.zone
import pytest

from dnsplan import axfr
from dnsplan.config import AppConfig
from dnsplan.models import ZoneFetchError

ZONE_TEXT = """
$TTL 3600
@       IN SOA ns1.example.com. hostmaster.example.com. 2024010100 3600 600 604800 86400
@       IN NS  ns1.example.com.
www 300 IN A   192.0.2.1
www 300 IN A   192.0.2.2
a-www   IN TXT "heritage=dnsplan,dnsplan/owner=me"
"""


def _config() -> AppConfig:
    return AppConfig(
        owner_id="me",
        owner_id_old="",
        owner_migrate=False,
        managed_record_types=("A",),
        domain_filter=(),
        exclude_domains=(),
        policy="sync",
        boolean_properties=(),
        boolean_property_default=False,
        txt_prefix="",
        bind_server="127.0.0.1",
        bind_port=5353,
        axfr_timeout=1.0,
        tsig=None,
        log_level="INFO",
    )


def test_zone_to_records_groups_rdatas() -> None:
    zone = dns.zone.from_text(ZONE_TEXT, origin="example.com.", relativize=False)

    records = {(r.dns_name, r.record_type): r for r in axfr.zone_to_records(zone)}

    assert set(records) == {
        ("example.com.", "NS"),
        ("www.example.com.", "A"),
        ("a-www.example.com.", "TXT"),
    }
    www = records[("www.example.com.", "A")]
    assert sorted(www.targets) == ["192.0.2.1", "192.0.2.2"]
    assert www.ttl == 300
    assert records[("a-www.example.com.", "TXT")].targets == ('"heritage=dnsplan,dnsplan/owner=me"',)


def test_fetch_records_wraps_transfer_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _refuse(**kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(axfr.dns.query, "xfr", _refuse)

    with pytest.raises(ZoneFetchError, match="example.com"):
        axfr.fetch_records("example.com.", _config())
