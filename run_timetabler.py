#!/usr/bin/env python3
"""
Timetabler CLI: single-workbook workflow.

The workbook holds the configuration:
  TEACHERS, CLASSES, HOMEROOM_PINS, OPTIONS  (data-entry sheets)

Usage:
  # Step 1: Add the data-entry sheets (with sample data) to a workbook
  python run_timetabler.py setup --workbook "timetable.xlsx"

  # Step 2 (optional): Dry-run: demand vs. capacity per scarce role
  python run_timetabler.py dry-run --workbook "timetable.xlsx"

  # Step 3: Generate the week and store the result document
  python run_timetabler.py generate --workbook "timetable.xlsx" --out "week.json"

  # Step 4: Re-check a (possibly hand-edited) result document
  python run_timetabler.py validate --workbook "timetable.xlsx" --result "week.json"
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from timetabler.composer import assignments_from_document, generate_week, homerooms_from_document
from timetabler.exceptions import ConfigError
from timetabler.feasibility import analyze_feasibility
from timetabler.parse_inputs import parse_workbook
from timetabler.validate import check_config, validate_assignments
from timetabler.workbook_sheets import setup_template


def _resolve(p: str) -> Path:
    pp = Path(p)
    if pp.is_absolute():
        return pp
    return Path.cwd() / pp


def _load(wb_path: str):
    print(f"Parsing: {wb_path}")
    config = parse_workbook(wb_path)
    print(f"  Local teachers: {len(config.pools.local)}")
    print(f"  Foreign teachers: {len(config.pools.foreign)}")
    for group, settings in sorted(config.groups.items(), key=lambda kv: kv[0].value):
        counts = ", ".join(f"R{r}={n}" for r, n in sorted(settings.round_class_counts.items()))
        print(f"  Group {group.value} classes: {counts or 'none'}")
    return config


def _print_list(title, lines, limit=15):
    if not lines:
        return
    print(f"\n{title} ({len(lines)}):")
    for line in lines[:limit]:
        print(f"  {line}")
    if len(lines) > limit:
        print(f"  ... and {len(lines) - limit} more")


def cmd_setup(args):
    """Add the data-entry sheets to the workbook."""
    wb_path = str(_resolve(args.workbook))
    print(f"Setting up sheets in: {wb_path}")
    setup_template(wb_path, overwrite=args.overwrite)
    print("Done. Sheets added:")
    print("  TEACHERS, CLASSES, HOMEROOM_PINS, OPTIONS")


def cmd_dry_run(args):
    """Check configuration and scarce-role capacity without generating."""
    config = _load(str(_resolve(args.workbook)))
    problems = check_config(config)
    if problems:
        _print_list("Configuration problems", problems)
        sys.exit(2)

    report = analyze_feasibility(config)
    print("\nFeasibility:")
    for item in report.items:
        flag = "OK " if item.ok else "LOW"
        print(f"  [{flag}] group {item.group.value} R{item.round} {item.role.value}: "
              f"demand {item.demand} / capacity {item.capacity}")
    if report.ok:
        print("\nAll scarce roles fit.")
    else:
        print("\nSome rounds will have unassigned slots (generation still runs).")


def cmd_generate(args):
    """Generate the week and print a summary."""
    config = _load(str(_resolve(args.workbook)))
    result = generate_week(config)

    m = result.metrics
    print(f"\nGenerated {m['totalAssignments']} assignments in {m['generationTimeMs']} ms")
    print(f"  Assigned: {m['assignedCount']}  Unassigned: {m['unassignedCount']}  "
          f"Placeholders: {m['placeholderCount']}")
    print(f"  Teachers: {m['teachersCount']}  Classes: {m['classesCount']}")
    print("  Fairness deviation: "
          + ", ".join(f"{k}={v}" for k, v in result.fairness.deviation.items()))
    _print_list("Warnings", result.warnings)
    if result.validation.is_valid:
        print("\nValidation: OK")
    else:
        _print_list("Validation errors", result.validation.errors)

    if args.out:
        out_path = _resolve(args.out)
        print(f"\nWriting result to: {out_path}")
        with open(out_path, "w", encoding="utf-8") as fh:
            json.dump(result.to_document(), fh, ensure_ascii=False, indent=2)
    print("Done.")


def cmd_validate(args):
    """Re-validate a stored result document against the workbook."""
    config = _load(str(_resolve(args.workbook)))
    with open(_resolve(args.result), encoding="utf-8") as fh:
        document = json.load(fh)

    report = validate_assignments(assignments_from_document(document), config,
                                  homerooms_from_document(document) or None)
    _print_list("Warnings", report.warnings)
    _print_list("Info", report.infos)
    if report.is_valid:
        print("\nValidation: OK")
        return
    _print_list("Validation errors", report.errors)
    sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Timetabler: weekly teacher timetable",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", help="Command")

    # setup
    p_setup = sub.add_parser("setup", help="Add data-entry sheets")
    p_setup.add_argument("--workbook", required=True, help="Workbook path")
    p_setup.add_argument("--overwrite", action="store_true", help="Replace existing sheets")

    # dry-run
    p_dry = sub.add_parser("dry-run", help="Check demand vs. capacity")
    p_dry.add_argument("--workbook", required=True, help="Workbook path")

    # generate
    p_gen = sub.add_parser("generate", help="Generate the weekly timetable")
    p_gen.add_argument("--workbook", required=True, help="Workbook path")
    p_gen.add_argument("--out", default=None, help="Write the result document (JSON)")

    # validate
    p_val = sub.add_parser("validate", help="Re-validate a result document")
    p_val.add_argument("--workbook", required=True, help="Workbook path")
    p_val.add_argument("--result", required=True, help="Result document (JSON)")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    dispatch = {
        "setup": cmd_setup,
        "dry-run": cmd_dry_run,
        "generate": cmd_generate,
        "validate": cmd_validate,
    }
    try:
        dispatch[args.command](args)
    except ConfigError as exc:
        _print_list("Configuration problems", exc.problems)
        sys.exit(2)


if __name__ == "__main__":
    main()
