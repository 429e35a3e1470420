"""
Server Module for Sample Lookup

Provides an OSC bridge so a performance host (Max/MSP, Pure Data, JUCE)
can select instruments and resolve notes to sample paths over UDP.

Quick Start:
    ```python
    from sample_lookup.server import run_server
    run_server("catalog.csv", verbose=True)
    ```

Or via CLI:
    ```bash
    python -m sample_lookup.server catalog.csv --port 9000
    ```

Components:
    - SampleLookupOSCServer: Main OSC server class
    - ServerConfig: Configuration management
    - run_server: Convenience function

Protocol:
    See config.py for OSCAddresses defining the message protocol.
"""

from .config import (
    ServerConfig,
    OSCAddresses,
    DEFAULT_CONFIG,
    resolve_config,
)

from .osc_server import (
    SampleLookupOSCServer,
    configure_logging,
    run_server,
)

__all__ = [
    # Configuration
    "ServerConfig",
    "OSCAddresses",
    "DEFAULT_CONFIG",
    "resolve_config",

    # Server (OSC)
    "SampleLookupOSCServer",
    "configure_logging",
    "run_server",
]
