#!/usr/bin/env python3
"""
Sample Lookup - CLI Entry Point

Resolve instrument / technique / pitch / dynamic to sample files from a
catalog CSV, inspect a catalog, or start the OSC bridge for a host.

Usage:
    python main.py catalog.csv -i Violin -t pizzicato -p A4 -d mf
    python main.py catalog.csv -i Violin -t pizzicato -p A4 --root /samples
    python main.py catalog.csv --describe -i Violin
    python main.py catalog.csv --list
    python main.py catalog.csv --server --port 9000
    python main.py --server --config server.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from colorama import Fore, Style, just_fix_windows_console

from sample_lookup import (
    ConfigLoadError,
    RootPathStore,
    SampleLookup,
    SampleLookupError,
    InstrumentDescription,
)


def print_info(message: str):
    """Print info message."""
    print(f"{Fore.CYAN}ℹ{Style.RESET_ALL}  {message}")


def print_error(message: str):
    """Print error message."""
    print(f"{Fore.RED}✗{Style.RESET_ALL}  {message}", file=sys.stderr)


def print_description(description: InstrumentDescription):
    """Print an instrument overview."""
    print(f"{Fore.GREEN}{Style.BRIGHT}{description.instrument}{Style.RESET_ALL}")
    print(f"  Techniques: {', '.join(description.techniques)}")
    print(f"  Dynamics:   {', '.join(d or '(none)' for d in description.dynamics)}")
    print(f"  Pitches:    {', '.join(description.pitches)}")
    for technique, summary in description.by_technique.items():
        print(f"\n  {Fore.CYAN}{technique}{Style.RESET_ALL}")
        print(f"    Dynamics: {', '.join(d or '(none)' for d in summary.dynamics)}")
        print(f"    Pitches:  {', '.join(summary.pitches)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve musical attributes to recorded sample files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s catalog.csv -i Violin -t pizzicato -p A4 -d mf
  %(prog)s catalog.csv -i Violin -t pizzicato -p A4          (every dynamic)
  %(prog)s catalog.csv -i Violin -t pizzicato -p A4 --root /samples
  %(prog)s catalog.csv --describe -i Violin
  %(prog)s catalog.csv --list
  %(prog)s catalog.csv --server --port 9000
  %(prog)s --server --config server.yaml

Catalog Format:
  Comma-separated, first line is the header. Required columns:
  Instrument (in full), Technique (in full), Pitch, Dynamics, Path
        """,
    )

    parser.add_argument(
        "catalog",
        type=str,
        nargs="?",
        help="Catalog CSV file (optional with --server when --config or SLK_CATALOG names one)",
    )

    # Query
    parser.add_argument("-i", "--instrument", type=str, help="Instrument name")
    parser.add_argument("-t", "--technique", type=str, help="Technique name")
    parser.add_argument("-p", "--pitch", type=str, help="Pitch name (e.g. A4)")
    parser.add_argument(
        "-d", "--dynamic",
        type=str,
        help="Dynamic (e.g. mf); omit to match every dynamic",
    )
    parser.add_argument(
        "--root",
        type=str,
        help="Sample root directory (default: value saved by the host, if any)",
    )
    parser.add_argument(
        "--root-config",
        type=str,
        help="Root path sidecar file (default: next to the catalog)",
    )

    # Modes
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Describe techniques, dynamics and pitches of --instrument",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the instruments in the catalog",
    )
    parser.add_argument(
        "--server",
        action="store_true",
        help="Start the OSC bridge for a performance host",
    )
    parser.add_argument("--port", type=int, default=None, help="OSC receive port (default: 9000)")
    parser.add_argument("--send-port", type=int, default=None, help="OSC send port (default: 9001)")
    parser.add_argument("--host", type=str, default=None, help="OSC host address (default: 127.0.0.1)")
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="YAML server configuration (server mode)",
    )

    # Misc options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    just_fix_windows_console()

    if args.server:
        from sample_lookup.server import resolve_config, run_server

        try:
            config = resolve_config(args)
        except ConfigLoadError as e:
            print_error(str(e))
            return 1
        if not config.catalog_path:
            parser.error("a catalog is required (argument, --config or SLK_CATALOG)")

        run_server(config=config)
        return 0

    if not args.catalog:
        parser.error("the catalog argument is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    store = RootPathStore(args.root_config) if args.root_config else RootPathStore.beside(args.catalog)
    lookup = SampleLookup(args.catalog, root_store=store, root_path=args.root)

    try:
        if args.list:
            instruments = lookup.instruments()
            if args.json:
                print(json.dumps({"success": True, "instruments": instruments}, indent=2))
            else:
                print_info(f"{len(instruments)} instruments, {lookup.record_count} samples")
                for name in instruments:
                    print(f"  {name}")
            return 0

        if args.describe:
            description = lookup.list_tech_dyn(args.instrument)
            if args.json:
                print(json.dumps({"success": True, **description.to_dict()}, indent=2))
            else:
                print_description(description)
            return 0

        if not args.pitch:
            parser.error("--pitch is required for a lookup (or use --list / --describe)")

        lookup.select_instrument(args.instrument)
        lookup.select_technique(args.technique)
        paths = lookup.note(args.pitch, args.dynamic)

        if args.json:
            print(json.dumps({"success": True, "paths": paths}, indent=2))
        else:
            for path in paths:
                print(path)
        return 0

    except SampleLookupError as e:
        if args.json:
            print(json.dumps({"success": False, "code": e.code, "error": str(e)}, indent=2))
        else:
            print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
