"""
Entry point for running the OSC bridge as a module.

Usage:
    python -m sample_lookup.server CATALOG [--verbose] [--port PORT]
    python -m sample_lookup.server --config server.yaml
"""

import argparse
import sys

from ..errors import ConfigLoadError
from .config import resolve_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sample Lookup OSC Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m sample_lookup.server catalog.csv --verbose
    python -m sample_lookup.server catalog.csv --port 9000 --send-port 9001
    python -m sample_lookup.server --config server.yaml
        """
    )

    parser.add_argument(
        "catalog",
        nargs="?",
        help="Catalog CSV to serve (or set catalog_path in --config / SLK_CATALOG)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="YAML configuration file"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to receive OSC messages (default: 9000)"
    )

    parser.add_argument(
        "--send-port", "-s",
        type=int,
        default=None,
        help="Port to send OSC messages (default: 9001)"
    )

    parser.add_argument(
        "--host", "-H",
        type=str,
        default=None,
        help="Host address to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--root-config",
        type=str,
        default=None,
        help="File persisting the sample root (default: next to the catalog)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Import here to avoid the RuntimeWarning
    from .osc_server import run_server

    try:
        config = resolve_config(args)
    except ConfigLoadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if not config.catalog_path:
        parser.error("a catalog path is required")

    print(f"🎵 Starting Sample Lookup OSC Server")
    print(f"   Catalog: {config.catalog_path}")
    print(f"   Receiving on port: {config.recv_port}")
    print(f"   Sending to port: {config.send_port}")
    print(f"   Verbose: {config.verbose}")
    print()

    run_server(config=config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
