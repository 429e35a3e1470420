"""
Server Configuration Module

Centralized configuration for the OSC bridge.
All constants and defaults are defined here for easy modification.
"""

import argparse
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional
from pathlib import Path
import os

import yaml

from ..errors import ConfigLoadError, ErrorCode
from ..root_store import ROOT_CONFIG_FILENAME


@dataclass
class ServerConfig:
    """
    Configuration for the Sample Lookup OSC bridge.

    Attributes:
        recv_port: Port to receive OSC messages from the host
        send_port: Port to send OSC messages to the host
        host: Host address to bind to
        catalog_path: Catalog CSV served by the bridge
        root_config_path: Sidecar file persisting the sample root
        verbose: Enable verbose logging
        log_file: Optional file receiving log output
    """
    # Network Configuration
    recv_port: int = 9000
    send_port: int = 9001
    host: str = "127.0.0.1"

    # Paths
    catalog_path: Optional[str] = None
    root_config_path: Optional[str] = None

    # Logging
    verbose: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        """Set computed defaults after initialization."""
        if self.root_config_path is None and self.catalog_path:
            # Keep the sidecar next to the catalog
            self.root_config_path = str(
                Path(self.catalog_path).parent / ROOT_CONFIG_FILENAME
            )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create config from environment variables.

        Environment Variables:
            SLK_RECV_PORT: Receive port
            SLK_SEND_PORT: Send port
            SLK_HOST: Host address
            SLK_CATALOG: Catalog CSV path
            SLK_ROOT_CONFIG: Root path sidecar file
            SLK_VERBOSE: Enable verbose mode (1/true/yes)
            SLK_LOG_FILE: Log file path
        """
        try:
            return cls(
                recv_port=int(os.getenv("SLK_RECV_PORT", 9000)),
                send_port=int(os.getenv("SLK_SEND_PORT", 9001)),
                host=os.getenv("SLK_HOST", "127.0.0.1"),
                catalog_path=os.getenv("SLK_CATALOG"),
                root_config_path=os.getenv("SLK_ROOT_CONFIG"),
                verbose=os.getenv("SLK_VERBOSE", "").lower() in ("1", "true", "yes"),
                log_file=os.getenv("SLK_LOG_FILE"),
            )
        except ValueError as e:
            raise ConfigLoadError(f"Invalid port in environment: {e}")

    @classmethod
    def from_yaml(cls, path: str) -> "ServerConfig":
        """
        Create config from a YAML file whose keys match the field names.

        Raises:
            ConfigLoadError: If the file is missing, malformed or has unknown keys
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigLoadError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML file {config_path}: {e}")
        except OSError as e:
            raise ConfigLoadError(f"Failed to load configuration file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigLoadError(f"Configuration in {config_path} must be a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigLoadError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def resolve_config(args: argparse.Namespace) -> ServerConfig:
    """
    Merge environment, YAML file and command-line options (in that order).

    ``args`` needs ``config``, ``catalog``, ``port``, ``send_port``, ``host``,
    ``root_config`` and ``verbose``; None means "not given".

    Raises:
        ConfigLoadError: If the YAML file or environment is invalid
    """
    config = ServerConfig.from_yaml(args.config) if args.config else ServerConfig.from_env()
    values = asdict(config)

    overrides = {
        "catalog_path": args.catalog,
        "recv_port": args.port,
        "send_port": args.send_port,
        "host": args.host,
        "root_config_path": args.root_config,
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    if args.verbose:
        values["verbose"] = True
    if args.catalog and not args.root_config and config.catalog_path:
        # Drop a sidecar derived from a catalog the command line replaced
        derived = str(Path(config.catalog_path).parent / ROOT_CONFIG_FILENAME)
        if config.root_config_path == derived:
            values["root_config_path"] = None

    return ServerConfig(**values)


# OSC Message Addresses (Protocol Definition)
class OSCAddresses:
    """
    OSC address constants for message routing.

    Host → Bridge:
        /root - Set (and persist) the sample root directory
        /instrument - Select instrument
        /technique - Select technique
        /note - Resolve pitch [dynamic] for the current selection
        /reload - Re-read the catalog from disk
        /listtechdyn - Describe an instrument
        /ping - Health check
        /shutdown - Graceful shutdown

    Bridge → Host:
        /samples - Resolved sample paths (one list-valued message)
        /techdyn - Instrument description (JSON)
        /error - Error notification (JSON)
        /status - Status update (JSON)
        /pong - Health check response
    """

    # Incoming (Host → Python)
    ROOT = "/root"
    INSTRUMENT = "/instrument"
    TECHNIQUE = "/technique"
    NOTE = "/note"
    RELOAD = "/reload"
    LIST_TECH_DYN = "/listtechdyn"
    PING = "/ping"
    SHUTDOWN = "/shutdown"

    # Outgoing (Python → Host)
    SAMPLES = "/samples"
    TECH_DYN = "/techdyn"
    ERROR = "/error"
    STATUS = "/status"
    PONG = "/pong"


# Errors after which the bridge cannot keep serving
FATAL_ERROR_CODES = (
    ErrorCode.SHUTDOWN_IN_PROGRESS,
)


# Default configuration instance
DEFAULT_CONFIG = ServerConfig()
