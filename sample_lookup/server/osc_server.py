"""
OSC Server Module

OSC bridge between a performance host (Max/MSP, Pure Data, JUCE) and the
sample lookup. Handles incoming selection/query messages and sends resolved
sample paths or structured errors back.
"""

from __future__ import annotations

import json
import logging
import signal
import sys
import threading
import time
from typing import Any, Callable, Dict, Optional

from pythonosc import dispatcher, osc_server, udp_client

from ..errors import ErrorCode, SampleLookupError
from ..lookup import SampleLookup
from ..root_store import RootPathStore
from ..source_cache import SourceCache
from .config import (
    ServerConfig,
    OSCAddresses,
    FATAL_ERROR_CODES,
    DEFAULT_CONFIG,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


class SampleLookupOSCServer:
    """
    OSC Server for the Sample Lookup.

    Handles bidirectional communication with the host:
    - Receives root/selection/note/reload/describe commands
    - Sends resolved sample paths as one list-valued message
    - Sends errors as JSON so the host can show them to the user

    Example:
        ```python
        server = SampleLookupOSCServer(ServerConfig(catalog_path="catalog.csv"))
        server.start()  # Blocking - runs until shutdown
        ```

    Handlers run one at a time; the UDP server may dispatch on several
    threads, so every handler holds ``_lock`` while it touches the lookup.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        cache: Optional[SourceCache] = None,
    ):
        """
        Initialize the OSC server.

        Args:
            config: Server configuration (uses DEFAULT_CONFIG if None)
            cache: Catalog cache (uses the process-wide cache if None)
        """
        self.config = config or DEFAULT_CONFIG
        if not self.config.catalog_path:
            raise ValueError("ServerConfig.catalog_path is required")

        root_store = None
        if self.config.root_config_path:
            root_store = RootPathStore(self.config.root_config_path)

        self.lookup = SampleLookup(
            self.config.catalog_path,
            cache=cache,
            root_store=root_store,
        )

        # OSC components
        self._dispatcher = dispatcher.Dispatcher()
        self._server: Optional[osc_server.ThreadingOSCUDPServer] = None
        self._client: Optional[udp_client.SimpleUDPClient] = None

        # State
        self._running = False
        self._shutting_down = False
        self._server_thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

        # Callbacks for external integration (optional)
        self.on_samples: Optional[Callable[[list], None]] = None
        self.on_error: Optional[Callable[[int, str], None]] = None

        # Setup message handlers
        self._setup_handlers()

    def _setup_handlers(self):
        """Register OSC message handlers with dispatcher."""
        self._dispatcher.map(OSCAddresses.ROOT, self._handle_root)
        self._dispatcher.map(OSCAddresses.INSTRUMENT, self._handle_instrument)
        self._dispatcher.map(OSCAddresses.TECHNIQUE, self._handle_technique)
        self._dispatcher.map(OSCAddresses.NOTE, self._handle_note)
        self._dispatcher.map(OSCAddresses.RELOAD, self._handle_reload)
        self._dispatcher.map(OSCAddresses.LIST_TECH_DYN, self._handle_list_tech_dyn)
        self._dispatcher.map(OSCAddresses.PING, self._handle_ping)
        self._dispatcher.map(OSCAddresses.SHUTDOWN, self._handle_shutdown)

        # Default handler for unknown messages
        self._dispatcher.set_default_handler(self._handle_unknown)

    def start(self, handle_signals: bool = True):
        """
        Start the server (blocking).

        Args:
            handle_signals: Whether to setup signal handlers (disable for embedded use)
        """
        self._initialize()

        logger.info("🎵 Sample Lookup OSC Server")
        logger.info(f"   Catalog: {self.config.catalog_path}")
        logger.info(f"   Listening on {self.config.host}:{self.config.recv_port}")
        logger.info(f"   Sending to {self.config.host}:{self.config.send_port}")

        if handle_signals:
            try:
                signal.signal(signal.SIGINT, self._signal_handler)
                signal.signal(signal.SIGTERM, self._signal_handler)
            except (ValueError, OSError):
                # Signal handling not available in this context
                pass

        self._running = True

        try:
            self._server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        # Only stop if we're still marked as running (wasn't already stopped)
        if self._running:
            self.stop()

    def start_async(self) -> threading.Thread:
        """
        Start the server in a background thread.

        Returns:
            Thread object running the server
        """
        self._initialize()

        self._running = True
        self._server_thread = threading.Thread(
            target=self._server.serve_forever,
            name="OSCServer",
            daemon=True
        )
        self._server_thread.start()

        logger.info(f"🎵 OSC Server started on {self.config.host}:{self.config.recv_port}")

        return self._server_thread

    def stop(self):
        """Stop the server gracefully."""
        if not self._running:
            return

        logger.info("Shutting down server...")
        self._running = False

        if self._server:
            self._server.shutdown()
            self._server.server_close()

        logger.info("Server stopped.")

    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    def _initialize(self):
        """Initialize server components and load the catalog."""
        self._server = osc_server.ThreadingOSCUDPServer(
            (self.config.host, self.config.recv_port),
            self._dispatcher
        )

        self._client = udp_client.SimpleUDPClient(
            self.config.host,
            self.config.send_port
        )

        # Load up front so the first /note is instant; a bad catalog is
        # reported and can be fixed and picked up with /reload.
        try:
            payload = self.lookup.load()
            logger.info(f"   Samples: {len(payload.records)}")
        except SampleLookupError as e:
            self._send_error(e.code, str(e))

    # =========================================================================
    # OSC Message Handlers
    # =========================================================================

    def _handle_root(self, address: str, *args):
        """Handle /root <path>. An empty path clears the root."""
        logger.debug(f"📥 Received: {address} {args}")
        if not self._accepting(address):
            return
        path = _join_args(args)
        with self._lock:
            try:
                self.lookup.set_root(path)
            except SampleLookupError as e:
                # In-memory root is already applied
                self._send_error(e.code, str(e))
                return
        self._send_status("root_set", {"root": self.lookup.root_path or ""})

    def _handle_instrument(self, address: str, *args):
        """Handle /instrument <name>."""
        logger.debug(f"📥 Received: {address} {args}")
        if not self._accepting(address):
            return
        with self._lock:
            self.lookup.select_instrument(_join_args(args))

    def _handle_technique(self, address: str, *args):
        """Handle /technique <name>."""
        logger.debug(f"📥 Received: {address} {args}")
        if not self._accepting(address):
            return
        with self._lock:
            self.lookup.select_technique(_join_args(args))

    def _handle_note(self, address: str, *args):
        """
        Handle /note <pitch> [dynamic].

        Sends /samples with every resolved path, or /error.
        """
        logger.debug(f"📥 Received: {address} {args}")
        if not self._accepting(address):
            return

        if not args:
            self._send_error(ErrorCode.MISSING_PARAMETER, "Pitch is required")
            return
        if len(args) > 2:
            self._send_error(
                ErrorCode.INVALID_MESSAGE,
                f"Expected {address} <pitch> [dynamic], got {len(args)} arguments",
            )
            return

        pitch = str(args[0])
        dynamic = str(args[1]) if len(args) > 1 else None

        with self._lock:
            try:
                paths = self.lookup.note(pitch, dynamic)
            except SampleLookupError as e:
                self._send_error(e.code, str(e))
                return

        self._send_message(OSCAddresses.SAMPLES, *paths)

        if self.on_samples:
            self.on_samples(paths)

    def _handle_reload(self, address: str, *args):
        """Handle /reload: re-parse the catalog, keeping the old one on failure."""
        logger.info(f"📥 Received: {address}")
        if not self._accepting(address):
            return
        with self._lock:
            try:
                payload = self.lookup.reload()
            except SampleLookupError as e:
                self._send_error(e.code, str(e))
                return
        self._send_status("reloaded", {"records": len(payload.records)})

    def _handle_list_tech_dyn(self, address: str, *args):
        """Handle /listtechdyn [instrument]."""
        logger.debug(f"📥 Received: {address} {args}")
        if not self._accepting(address):
            return
        instrument = _join_args(args) or None
        with self._lock:
            try:
                description = self.lookup.list_tech_dyn(instrument)
            except SampleLookupError as e:
                self._send_error(e.code, str(e))
                return
        self._send_message(OSCAddresses.TECH_DYN, json.dumps(description.to_dict()))

    def _handle_ping(self, address: str, *args):
        """Handle /ping message for health check."""
        self._send_message(OSCAddresses.PONG, json.dumps({
            "status": "shutting_down" if self._shutting_down else "ok",
            "records": self.lookup.record_count,
            "timestamp": time.time(),
        }))

    def _handle_shutdown(self, address: str, *args):
        """Handle /shutdown message for graceful shutdown."""
        logger.info(f"📥 Received: {address}")
        if not self._accepting(address):
            return
        self._shutting_down = True
        self._send_status("shutdown_started", {})

        # serve_forever() must be stopped from another thread
        threading.Thread(target=self.stop, daemon=True).start()

    def _handle_unknown(self, address: str, *args):
        """Handle unknown OSC messages."""
        logger.warning(f"⚠️  Unknown message: {address} {args}")
        self._send_error(ErrorCode.INVALID_MESSAGE, f"Unknown address: {address}")

    def _accepting(self, address: str) -> bool:
        """Reject commands once /shutdown has been received."""
        if self._shutting_down:
            self._send_error(ErrorCode.SHUTDOWN_IN_PROGRESS, f"Server is shutting down; {address} ignored")
            return False
        return True

    # =========================================================================
    # OSC Message Sending
    # =========================================================================

    def _send_message(self, address: str, *args):
        """Send an OSC message to the host."""
        if self._client:
            try:
                self._client.send_message(address, list(args))
            except OSError as e:
                logger.warning(f"⚠️  Failed to send message: {e}")

    def _send_error(self, code: int, message: str):
        """Send an error message to the host."""
        logger.error(f"❌ Error [{code}]: {message}")

        self._send_message(OSCAddresses.ERROR, json.dumps({
            "code": code,
            "message": message,
            "recoverable": code not in FATAL_ERROR_CODES,
        }))

        if self.on_error:
            self.on_error(code, message)

    def _send_status(self, status: str, data: Dict[str, Any]):
        """Send a status update to the host."""
        self._send_message(OSCAddresses.STATUS, json.dumps({
            "status": status,
            **data,
        }))

    # =========================================================================
    # Utilities
    # =========================================================================

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        if not self._running:
            return

        signal_name = signal.Signals(signum).name
        logger.info(f"📛 Received signal: {signal_name}")
        self.stop()
        sys.exit(0)


def _join_args(args) -> str:
    """
    Rebuild a single string argument.

    Hosts such as Max split unquoted symbols on spaces, so "Alto Flute"
    can arrive as two arguments.
    """
    return " ".join(str(a) for a in args).strip()


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure root logging for the bridge process."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def run_server(
    catalog_path: Optional[str] = None,
    recv_port: int = 9000,
    send_port: int = 9001,
    host: str = "127.0.0.1",
    verbose: bool = False,
    config: Optional[ServerConfig] = None,
    **kwargs
):
    """
    Convenience function to start the OSC server.

    Args:
        catalog_path: Catalog CSV to serve
        recv_port: Port to receive messages (default 9000)
        send_port: Port to send messages (default 9001)
        host: Host address (default localhost)
        verbose: Enable verbose logging
        config: Complete configuration; overrides the other arguments
        **kwargs: Additional config options

    Example:
        ```python
        from sample_lookup.server import run_server
        run_server("catalog.csv", verbose=True)  # Blocking
        ```
    """
    if config is None:
        config = ServerConfig(
            catalog_path=catalog_path,
            recv_port=recv_port,
            send_port=send_port,
            host=host,
            verbose=verbose,
            **kwargs
        )

    configure_logging(config.verbose, config.log_file)

    server = SampleLookupOSCServer(config)
    server.start()
