"""
Manual client for the Sample Lookup OSC bridge.

Usage:
    python osc_client.py [command] [args...]

Commands:
    ping                          - Send ping message
    note INSTRUMENT TECHNIQUE PITCH [DYNAMIC]
                                  - Select and resolve a note
    describe [INSTRUMENT]         - Send /listtechdyn
    root PATH                     - Set the sample root
    reload                        - Re-read the catalog
    shutdown                      - Shutdown server
"""

import json
import sys
import time
import threading
from pythonosc import udp_client, dispatcher, osc_server


# Server ports (matching default config)
SERVER_PORT = 9000  # Server receives here
CLIENT_PORT = 9001  # Server sends here (we receive)


def create_receiver():
    """Create OSC receiver for server responses."""
    disp = dispatcher.Dispatcher()

    def handle_any(address, *args):
        print(f"📨 Received: {address}")
        for arg in args:
            try:
                data = json.loads(arg) if isinstance(arg, str) else arg
                print(f"   {json.dumps(data, indent=2)}")
            except ValueError:
                print(f"   {arg}")

    disp.set_default_handler(handle_any)

    server = osc_server.ThreadingOSCUDPServer(
        ("127.0.0.1", CLIENT_PORT),
        disp
    )

    return server


def send(address: str, *args):
    """Send one message to the bridge."""
    client = udp_client.SimpleUDPClient("127.0.0.1", SERVER_PORT)
    print(f"📤 Sending: {address} {' '.join(str(a) for a in args)}")
    client.send_message(address, list(args))


def send_note(instrument: str, technique: str, pitch: str, dynamic: str = None):
    """Select instrument and technique, then resolve a note."""
    send("/instrument", instrument)
    send("/technique", technique)
    if dynamic:
        send("/note", pitch, dynamic)
    else:
        send("/note", pitch)


def main():
    command = sys.argv[1] if len(sys.argv) > 1 else "ping"
    params = sys.argv[2:]

    # Start receiver in background
    receiver = create_receiver()
    receiver_thread = threading.Thread(target=receiver.serve_forever, daemon=True)
    receiver_thread.start()
    print(f"🎧 Listening for responses on port {CLIENT_PORT}")
    print()

    # Send command
    if command == "ping":
        send("/ping")
    elif command == "note" and len(params) >= 3:
        send_note(*params[:4])
    elif command == "describe":
        send("/listtechdyn", *params[:1])
    elif command == "root" and params:
        send("/root", params[0])
    elif command == "reload":
        send("/reload")
    elif command == "shutdown":
        send("/shutdown")
    else:
        print(f"Unknown command: {command}")
        print("Use: ping, note, describe, root, reload, shutdown")
        sys.exit(1)

    # Wait for responses
    print()
    print("Waiting for responses (Ctrl+C to exit)...")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nExiting.")


if __name__ == "__main__":
    main()
