"""Command-line interface.

Examples::

    l5ingest parse Plant.L5X
    l5ingest parse Plant.L5K --json > records.json
    l5ingest analyze Plant.L5X --rules naming.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .analysis import analyze_health, check_naming
from .config import IngestSettings, check_upload, load_naming_rules
from .errors import IngestError
from .model.project import ProjectRecords
from .pipeline import ingest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l5ingest",
        description="Parse controller-project exports (.L5X / .L5K) and analyze them.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v) or debug detail (-vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    parse = sub.add_parser("parse", help="Extract the record set from a project file")
    parse.add_argument("file", metavar="FILE", help="Project export (.L5X or .L5K)")
    parse.add_argument("--json", action="store_true", help="Print the full record set as JSON")
    parse.add_argument("--parallel", action="store_true",
                       help="Run the entity extractors on a thread pool")

    analyze = sub.add_parser("analyze", help="Naming, unused-tag and health analysis")
    analyze.add_argument("file", metavar="FILE", help="Project export (.L5X or .L5K)")
    analyze.add_argument("--rules", metavar="RULES_YAML",
                         help="Naming rule file (YAML with a top-level 'rules' list)")
    analyze.add_argument("--json", action="store_true", help="Print the reports as JSON")
    return parser


def _load(path: Path, settings: IngestSettings, parallel: bool) -> ProjectRecords:
    check_upload(path.name, path.stat().st_size, settings)
    return ingest(
        path.read_bytes(),
        filename=path.name,
        parallel=parallel or settings.parallel_extraction,
    )


def _print_summary(records: ProjectRecords) -> None:
    info = records.controller
    print(f"Controller: {info.name or '?'} ({info.processor_type or 'unknown processor'})")
    print(f"Format:     {records.file_format.value.upper()}")
    for family, count in records.counts().items():
        print(f"  {family:<22}{count:>7}")
    if records.diagnostics:
        print(f"Diagnostics ({len(records.diagnostics)}):")
        for diagnostic in records.diagnostics:
            where = f" line {diagnostic.line}" if diagnostic.line else ""
            print(f"  [{diagnostic.kind.value}]{where} {diagnostic.message}")


def _cmd_parse(args: argparse.Namespace, settings: IngestSettings) -> int:
    records = _load(Path(args.file), settings, args.parallel)
    if args.json:
        print(records.model_dump_json(indent=2))
    else:
        _print_summary(records)
    return 0


def _cmd_analyze(args: argparse.Namespace, settings: IngestSettings) -> int:
    records = _load(Path(args.file), settings, False)
    rules = load_naming_rules(args.rules) if args.rules else []
    naming = check_naming(records.tags, rules)
    health = analyze_health(records)

    if args.json:
        payload = {
            "naming": naming.model_dump(mode="json"),
            "health": health.model_dump(mode="json"),
        }
        print(json.dumps(payload, indent=2))
        return 0

    scores = health.scores
    print(f"Health: {scores.overall}/100 "
          f"(tag efficiency {scores.tag_efficiency}, documentation {scores.documentation}, "
          f"tag usage {scores.tag_usage})")
    print(f"Unused tags: {len(health.unused_tags)} of {health.total_tags}")
    for tag in health.unused_tags:
        print(f"  {tag.scope}/{tag.name}")
    summary = naming.summary
    print(f"Naming: {summary.errors} errors, {summary.warnings} warnings, {summary.info} info "
          f"over {naming.tags_checked} tags")
    for violation in naming.violations:
        print(f"  [{violation.severity.value}] {violation.tag_scope}/{violation.tag_name}: "
              f"{violation.message}")
    for skipped in naming.skipped_rules:
        print(f"  skipped rule {skipped.rule_name!r}: {skipped.reason}")
    for conflict in naming.scope_conflicts:
        print(f"  scope conflict: {conflict.tag_name} shadowed in {', '.join(conflict.programs)}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    settings = IngestSettings.from_env()
    handlers = {"parse": _cmd_parse, "analyze": _cmd_analyze}
    try:
        return handlers[args.command](args, settings)
    except (IngestError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
