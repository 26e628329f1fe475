#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
#
# pirevision_tool.py
#
# Command-line interface: decodes Raspberry Pi revision codes given as
# arguments, or the one found in /proc/cpuinfo when none are given.
#
import argparse
import sys
from typing import List, Optional

from pirevision_library import CPUINFO_PATH_DEFAULT, load_revision, read_cpuinfo_revision

def cmd_decode(code_str: str, args: argparse.Namespace) -> None:
    """Decodes and prints a single revision code."""
    rev = load_revision(code_str)

    if not args.quiet:
        for warning in rev.decode()["warnings"]:
            print(f"[WARN] 0x{rev.original:X}: {warning}", file=sys.stderr)

    if args.json:
        print(rev.render_json())
    else:
        print(rev.render_text(programmer_mode=args.programmer))

    if args.show_map:
        print(f"\n--- Field map (0x{rev.code:X}) ---")
        print(rev.dump_field_map())

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Convert Raspberry Pi revision codes (hex) to readable text or JSON."
    )
    ap.add_argument("codes", nargs="*", metavar="code",
                    help="Revision code(s) in hex, with or without 0x prefix. Signs and "
                         "trailing characters are rejected, not ignored. "
                         "If none are given the code is read from the cpuinfo file.")
    ap.add_argument("-j", "--json", action="store_true", help="Output JSON instead of text.")
    ap.add_argument("--programmer", action="store_true",
                    help="Show bit positions and raw field values in text output.")
    ap.add_argument("--show-map", action="store_true", help="Also print the raw bit-field map.")
    ap.add_argument("--cpuinfo", default=CPUINFO_PATH_DEFAULT,
                    help=f"cpuinfo file used when no code is given (default: {CPUINFO_PATH_DEFAULT})")
    ap.add_argument("--quiet", action="store_true", help="suppress warnings")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    codes = args.codes
    if not codes:
        try:
            codes = [read_cpuinfo_revision(args.cpuinfo)]
        except (ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    status = 0
    for code_str in codes:
        try:
            cmd_decode(code_str, args)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            status = 1
    return status

if __name__ == "__main__":
    raise SystemExit(main())
