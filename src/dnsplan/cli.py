"""Command-line entry point for dnsplan."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .controller import PlanController, PlanResult, configure_logging
from .exporter import changes_to_json, changes_to_yaml, records_to_yaml, write_output
from .models import DnsPlanError


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Plan DNS record changes towards a desired state.")
    parser.add_argument("--log-level", help="Override log level (default from config).")

    subparsers = parser.add_subparsers(dest="command", required=True)
    plan_parser = subparsers.add_parser("plan", help="Show the changes between desired and current state.")
    plan_parser.add_argument("--desired", required=True, help="Path to the desired-state YAML file.")
    source = plan_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--current", help="Path to a current-state YAML snapshot.")
    source.add_argument("--zone", help="Zone to fetch the current state from via AXFR.")
    plan_parser.add_argument(
        "-e",
        "--var",
        action="append",
        help="Template variable in KEY=VALUE form. Can be repeated.",
    )
    plan_parser.add_argument("--json", help="Optional path to write the changes as JSON.")
    plan_parser.add_argument("--yaml", help="Optional path to write the changes as YAML.")

    pull_parser = subparsers.add_parser("pull", help="Fetch current records via AXFR.")
    pull_parser.add_argument("--zone", required=True, help="Zone name to pull.")
    pull_parser.add_argument("--output", help="Path to write the records YAML (default stdout).")

    return parser


def _parse_template_vars(values: list[str] | None) -> dict[str, str]:
    """Convert KEY=VALUE pairs into a dict."""
    result: dict[str, str] = {}
    if not values:
        return result
    for value in values:
        if "=" not in value:
            raise DnsPlanError(f"Invalid template var '{value}', expected KEY=VALUE.")
        key, val = value.split("=", 1)
        result[key] = val
    return result


def _emit_changes(result: PlanResult) -> None:
    """Print a human-friendly summary of the changes."""
    changes = result.changes
    print(f"Create: {len(changes.create)}")
    for record in changes.create:
        print(f" + {record.record_type} {record.dns_name} -> {', '.join(record.targets)}")
    print(f"Update: {len(changes.update_new)}")
    for old, new in zip(changes.update_old, changes.update_new):
        print(f" ~ {old.record_type} {old.dns_name} {', '.join(old.targets)} -> {', '.join(new.targets)}")
    print(f"Delete: {len(changes.delete)}")
    for record in changes.delete:
        print(f" - {record.record_type} {record.dns_name} -> {', '.join(record.targets)}")
    if result.has_migration:
        print("Owner migration pending.")


def _run_plan(controller: PlanController, args: argparse.Namespace) -> PlanResult:
    """Execute the plan command."""
    result = controller.plan(
        Path(args.desired),
        current_path=Path(args.current) if args.current else None,
        zone=args.zone,
        template_vars=_parse_template_vars(args.var),
    )
    _emit_changes(result)
    if args.json:
        write_output(Path(args.json), changes_to_json(result.changes))
        print(f"Wrote changes JSON to {args.json}")
    if args.yaml:
        write_output(Path(args.yaml), changes_to_yaml(result.changes))
        print(f"Wrote changes YAML to {args.yaml}")
    if not result.changes.has_changes():
        print("No changes detected.")
    return result


def _run_pull(controller: PlanController, args: argparse.Namespace) -> None:
    """Execute the pull command."""
    content = records_to_yaml(controller.pull(args.zone))
    if args.output:
        write_output(Path(args.output), content)
        print(f"Wrote records to {args.output}")
    else:
        print(content)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config()
        configure_logging(args.log_level or config.log_level)
        controller = PlanController(config)
        if args.command == "plan":
            _run_plan(controller, args)
        elif args.command == "pull":
            _run_pull(controller, args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except DnsPlanError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
