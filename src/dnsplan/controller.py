"""High-level orchestration for dnsplan."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .axfr import fetch_records
from .config import AppConfig
from .domain_filter import DomainFilter
from .models import OWNER_LABEL_KEY, Changes, DnsPlanError, Record
from .plan import Plan, PropertyComparator, boolean_comparator
from .policy import policy_from_name
from .registry import TxtRegistry
from .yaml_loader import load_records

LOG = logging.getLogger("dnsplan")


@dataclass
class PlanResult:
    """Holds the calculated plan and the changes to hand to a provider."""

    plan: Plan
    changes: Changes

    @property
    def has_migration(self) -> bool:
        return self.plan.has_migration


class PlanController:
    """Loads record sources and runs the planner."""

    def __init__(self, config: AppConfig):
        """Store configuration for subsequent runs."""
        self.config = config
        self.registry = TxtRegistry(config.owner_id, prefix=config.txt_prefix)

    def plan(
        self,
        desired_path: Path,
        current_path: Path | None = None,
        zone: str | None = None,
        template_vars: dict[str, Any] | None = None,
    ) -> PlanResult:
        """Compute the changes between the desired YAML and the current records."""
        desired = [self._stamp_owner(record) for record in load_records(desired_path, template_vars)]
        raw_current = self.pull(zone, current_path)
        view = self.registry.records(raw_current)

        plan = Plan(
            current=view.records,
            desired=desired,
            missing=view.missing,
            policies=[policy_from_name(self.config.policy)],
            domain_filter=DomainFilter(self.config.domain_filter, self.config.exclude_domains),
            property_comparator=self._comparator(),
            managed_records=self.config.managed_record_types,
            owner_id=self.config.owner_id,
            owner_id_old=self.config.owner_id_old,
            owner_migrate=self.config.owner_migrate,
        ).calculate()

        changes = self.registry.generate_txt_records(plan.changes or Changes())
        if plan.has_migration:
            LOG.info("Owner migration from %s to %s in progress", self.config.owner_id_old, self.config.owner_id)
        return PlanResult(plan=plan, changes=changes)

    def pull(self, zone: str | None = None, current_path: Path | None = None) -> list[Record]:
        """Read the current records from a YAML snapshot or via AXFR."""
        if current_path is not None:
            LOG.debug("Loading current records from %s", current_path)
            return load_records(current_path)
        if not zone:
            raise DnsPlanError("Either a current-state file or a zone to transfer is required.")
        LOG.debug("Fetching current records for %s from %s", zone, self.config.bind_server)
        return fetch_records(zone, self.config)

    def _stamp_owner(self, record: Record) -> Record:
        if record.owner() is not None:
            return record
        return record.with_labels(**{OWNER_LABEL_KEY: self.config.owner_id})

    def _comparator(self) -> PropertyComparator | None:
        if not self.config.boolean_properties:
            return None
        return boolean_comparator(self.config.boolean_property_default, self.config.boolean_properties)


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
