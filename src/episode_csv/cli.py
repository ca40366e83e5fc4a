"""Command-line entry point for processing scraped episode exports.

Usage:
    python -m episode_csv.cli process export.csv --episodes 1 2 3            # delete episodes 1-3
    python -m episode_csv.cli process export.csv --episodes 4 5 --mode keep  # keep only 4 and 5
    python -m episode_csv.cli process export.csv --episodes 7 --platform-url https://v.youku.com/...
    python -m episode_csv.cli process export.csv --episodes 1 --dry-run      # report only
    python -m episode_csv.cli analyze export.csv                             # list remaining episodes
    python -m episode_csv.cli repair broken.csv --output fixed.csv           # re-merge broken lines
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from episode_csv.config import LOG_LEVEL
from episode_csv.parsing.patterns import OPTIONAL_COLUMNS
from episode_csv.parsing.repair import repair
from episode_csv.parsing.serializer import serialize
from episode_csv.parsing.validation import validate
from episode_csv.reconcile.pipeline import ProcessOptions, analyze_export, process_export, request_for_platform
from episode_csv.reconcile.schema import ReconcileMode
from episode_csv.storage import load_text, save_text

logger = logging.getLogger(__name__)


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


# ─── Subcommands ─────────────────────────────────────────────────────────────


def cmd_process(args: argparse.Namespace) -> int:
    text = load_text(args.path)
    request = request_for_platform(args.episodes, args.platform_url, mode=ReconcileMode(args.mode))
    options = ProcessOptions(
        item_title=args.item_title,
        clean_titles=not args.no_title_cleaning,
        remove_columns=args.remove_column or [],
        normalize_overview=args.normalize_overview,
        dry_run=args.dry_run,
    )
    outcome = process_export(text, request, options)

    if not outcome.ok:
        _print_json({"success": False, "error": outcome.error, "headers": outcome.headers, "searched_columns": outcome.searched_aliases})
        return 1

    backup_file = None
    if outcome.output_text is not None:
        backup_file = save_text(args.path, outcome.output_text, backup=not args.no_backup)

    response = outcome.result.to_response()
    _print_json(
        {
            "success": True,
            "dry_run": args.dry_run,
            "original_row_count": outcome.original_row_count,
            **response.model_dump(),
            "removed_columns": outcome.removed_columns,
            "title_cleanups": len(outcome.title_cleanups),
            "repaired": outcome.repaired,
            "backup_path": str(backup_file) if backup_file else None,
            "diagnostics": [d.model_dump(mode="json") for d in outcome.diagnostics],
        }
    )
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    outcome = analyze_export(load_text(args.path))
    if not outcome.ok:
        _print_json({"success": False, "error": outcome.error, "headers": outcome.headers, "searched_columns": outcome.searched_aliases})
        return 1

    inventory = outcome.inventory
    _print_json(
        {
            "success": True,
            "remaining_episodes": inventory.episodes,
            "episode_column_index": outcome.episode_column_index,
            "episode_column_name": outcome.episode_column_name,
            "data_rows": outcome.data_rows,
            "parse_errors": inventory.parse_error_count,
            "parse_error_details": [e.model_dump() for e in inventory.parse_errors],
            "episode_range": (
                {"min": inventory.lowest, "max": inventory.highest, "count": inventory.count} if inventory.episodes else None
            ),
        }
    )
    return 0


def cmd_repair(args: argparse.Namespace) -> int:
    report = repair(load_text(args.path))
    validated = validate(report.table)
    output = Path(args.output) if args.output else Path(args.path)
    save_text(output, serialize(validated.table), backup=not args.no_backup)
    _print_json(
        {
            "success": True,
            "output": str(output),
            "rows": len(validated.table.rows),
            "merged_rows": report.merged_rows,
            "splits": report.splits,
            "residual_mismatches": len(validated.mismatches),
        }
    )
    return 0


# ─── Argument Parsing ────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="episode-csv", description="Repair and reconcile scraped episode exports")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="Delete or keep rows by episode number and write the file back")
    process.add_argument("path", help="Export CSV file")
    process.add_argument("--episodes", type=int, nargs="+", required=True, help="Episode numbers to reconcile")
    process.add_argument("--mode", choices=[m.value for m in ReconcileMode], default=ReconcileMode.DELETE.value)
    process.add_argument("--platform-url", default=None, help="Source platform URL (selects the episode offset)")
    process.add_argument("--item-title", default=None, help="Show title to strip from episode name cells")
    process.add_argument("--no-title-cleaning", action="store_true", help="Leave name cells untouched")
    process.add_argument(
        "--remove-column", action="append", choices=OPTIONAL_COLUMNS, help="Drop a column from the output (repeatable)"
    )
    process.add_argument("--normalize-overview", action="store_true", help="Collapse line breaks in the overview column")
    process.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    process.add_argument("--no-backup", action="store_true", help="Do not write a .bak copy before overwriting")
    process.set_defaults(func=cmd_process)

    analyze = sub.add_parser("analyze", help="List the episode numbers an export still contains")
    analyze.add_argument("path", help="Export CSV file")
    analyze.set_defaults(func=cmd_analyze)

    fix = sub.add_parser("repair", help="Re-merge rows broken across physical lines")
    fix.add_argument("path", help="Corrupted export CSV file")
    fix.add_argument("--output", default=None, help="Write here instead of overwriting the input")
    fix.add_argument("--no-backup", action="store_true", help="Do not write a .bak copy before overwriting")
    fix.set_defaults(func=cmd_repair)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s", stream=sys.stderr)
    try:
        return args.func(args)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        _print_json({"success": False, "error": str(exc)})
        return 1


if __name__ == "__main__":
    sys.exit(main())
