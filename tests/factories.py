from __future__ import annotations

from dnsplan.models import OWNER_LABEL_KEY, RESOURCE_LABEL_KEY, ProviderSpecificProperty, Record


def make_record(
    name: str,
    *targets: str,
    record_type: str = "A",
    ttl: int | None = None,
    owner: str | None = None,
    resource: str | None = None,
    set_identifier: str = "",
    properties: dict[str, str] | None = None,
) -> Record:
    labels: dict[str, str] = {}
    if owner is not None:
        labels[OWNER_LABEL_KEY] = owner
    if resource is not None:
        labels[RESOURCE_LABEL_KEY] = resource
    return Record(
        dns_name=name,
        record_type=record_type,
        targets=targets,
        ttl=ttl,
        set_identifier=set_identifier,
        labels=labels,
        provider_specific=[ProviderSpecificProperty(key, value) for key, value in (properties or {}).items()],
    )
