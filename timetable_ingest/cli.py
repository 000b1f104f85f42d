"""
Command-line interface: parse a registrar timetable file and export it.
"""
from __future__ import annotations

import argparse
import logging
import sys
import warnings
from datetime import date
from pathlib import Path

# openpyxl warns about sheets saved without a default style (no impact on values)
warnings.filterwarnings("ignore", message=".*no default style.*", module="openpyxl")

from . import __version__
from .engine import PARSERS, parse_file, resolve_parser_name
from .export import DEFAULT_TIMEZONE, export
from .spreadsheet import template_filename, write_template


def _print_units(units) -> None:
    print("Unit Code    | Department | Unit Name")
    print("-" * 60)
    for u in units.values():
        print(f"{u.code:<12} | {(u.department or ''):<10} | {u.name[:40]}")


def _output_path(output: str, fmt: str) -> Path:
    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[fmt]
    return Path(output).with_suffix(ext) if Path(output).suffix else Path(output + ext)


def main(argv: list[str] | None = None) -> int:
    keys = ", ".join(p.key for p in PARSERS)
    parser = argparse.ArgumentParser(
        prog="timetable-ingest",
        description=(
            "Detect the layout of a university timetable spreadsheet and export "
            "its sessions to JSON / CSV / ICS.\n"
            "Supported inputs: .xlsx, .xls, .csv, .html."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("input", nargs="?", metavar="FILE", help="Timetable file to parse.")
    parser.add_argument(
        "-o",
        "--output",
        help="Output path (without extension). Default: timetable",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "csv", "ics"],
        default="json",
        help="Export format. Default: json",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--list-parsers",
        action="store_true",
        help="List the supported timetable formats in detection order, then exit.",
    )
    mode.add_argument(
        "--template",
        metavar="FORMAT",
        help=f"Write a sample .xlsx for one format ({keys}) and exit.",
    )

    parser.add_argument("--semester", type=int, default=1, help="Semester stamped on every entry. Default: 1")
    parser.add_argument(
        "--year",
        type=int,
        default=date.today().year,
        help="Academic year stamped on every entry. Default: current year",
    )
    parser.add_argument("--institution", default="", help="Institution id stamped on every entry.")
    parser.add_argument(
        "-p",
        "--parser",
        action="append",
        metavar="FORMAT",
        help=f"Only try this format ({keys}). Repeat to allow several.",
    )
    parser.add_argument(
        "--list-units",
        action="store_true",
        help="List the units found in the file (code, department, name) then exit.",
    )

    # ICS options
    parser.add_argument(
        "--term-start",
        metavar="YYYY-MM-DD",
        help="(ICS) First teaching day; weekly classes start on their first weekday on/after it.",
    )
    parser.add_argument(
        "--term-end",
        metavar="YYYY-MM-DD",
        help="(ICS) Last teaching day; weekly classes repeat until it.",
    )
    parser.add_argument(
        "--timezone",
        default=DEFAULT_TIMEZONE,
        help=f"(ICS) Calendar timezone. Default: {DEFAULT_TIMEZONE}",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log format detection details.")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.list_parsers:
        for p in PARSERS:
            print(f"{p.key:<5} | {p.name}: {p.description}")
        return 0

    if args.template:
        try:
            name = resolve_parser_name(args.template)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        out_path = Path(args.output) if args.output else Path(template_filename(name))
        write_template(name, out_path.with_suffix(".xlsx"))
        print(f"Template for {name} written to {out_path.with_suffix('.xlsx')}")
        return 0

    if not args.input:
        print(
            "No input file. Pass a timetable file, or use --list-parsers / --template FORMAT.",
            file=sys.stderr,
        )
        return 1

    try:
        parsers_to_use = [resolve_parser_name(p) for p in args.parser] if args.parser else None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    outcome = parse_file(
        args.input,
        semester=args.semester,
        year=args.year,
        institution_id=args.institution,
        parsers_to_use=parsers_to_use,
    )
    if not outcome.success:
        print(f"Error: {outcome.error}", file=sys.stderr)
        return 1

    result = outcome.data
    print(f"Detected format: {outcome.parser_used}")

    if args.list_units:
        _print_units(result.units)
        return 0

    out_path = _output_path(args.output or "timetable", args.format)
    try:
        export(
            result,
            out_path,
            args.format,
            term_start=args.term_start,
            term_end=args.term_end,
            tz=args.timezone,
        )
    except (ValueError, KeyError) as e:
        print(f"Error exporting timetable: {e}", file=sys.stderr)
        return 1
    print(f"Exported {len(result.entries)} entry(ies) for {len(result.units)} unit(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
