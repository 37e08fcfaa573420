"""AXFR record source built on dnspython."""

from __future__ import annotations

from typing import List

import dns.exception
import dns.query
import dns.rdatatype
import dns.tsigkeyring
import dns.zone

from .config import AppConfig
from .models import Record, ZoneFetchError

SKIPPED_TYPES = {"SOA", "RRSIG", "NSEC", "NSEC3", "DNSKEY"}


def zone_to_records(zone: dns.zone.Zone) -> List[Record]:
    """Convert a dnspython zone into records, one per name and type."""
    records: List[Record] = []
    for name, node in zone.nodes.items():
        owner = name.derelativize(zone.origin).to_text() if zone.origin else name.to_text()
        for rdataset in node.rdatasets:
            rtype = dns.rdatatype.to_text(rdataset.rdtype)
            if rtype in SKIPPED_TYPES:
                continue
            targets = [rdata.to_text() for rdata in rdataset]
            records.append(Record(dns_name=owner, record_type=rtype, targets=targets, ttl=rdataset.ttl))
    return records


def fetch_records(zone_name: str, config: AppConfig) -> List[Record]:
    """Return the current records of a zone from the authoritative server."""
    kwargs = {}
    if config.tsig is not None:
        kwargs = {
            "keyring": dns.tsigkeyring.from_text({config.tsig.name: config.tsig.secret}),
            "keyname": config.tsig.name,
            "keyalgorithm": config.tsig.algorithm,
        }

    try:
        xfr = dns.query.xfr(
            where=config.bind_server,
            zone=zone_name,
            port=config.bind_port,
            relativize=False,
            timeout=config.axfr_timeout,
            **kwargs,
        )
        zone = dns.zone.from_xfr(xfr, relativize=False)
    except (dns.exception.DNSException, OSError) as exc:
        raise ZoneFetchError(f"AXFR failed for zone {zone_name}: {exc}") from exc

    return zone_to_records(zone)
