"""
Usage:
  python3 -m websearch_mcp [--config websearch.json] [--allowed-domain ftrack.com ...]
"""
from __future__ import annotations

import signal
import sys
import threading

from .config import ConfigError, load_settings
from .log import configure_logging
from .server import WebSearchServer


def main(argv=None) -> int:
    """Main entry point: load settings, then serve MCP over stdio until EOF."""
    try:
        settings = load_settings(argv)
    except ConfigError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1

    logger = configure_logging(settings.log_level)
    stop_event = threading.Event()

    def request_shutdown(signum, frame):
        logger.info("Shutdown requested...")
        stop_event.set()
        # readline is retried after a signal, so unblock it explicitly
        raise KeyboardInterrupt

    # JSON-RPC lines are UTF-8 regardless of the platform locale
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")

    server = WebSearchServer(settings)
    signal.signal(signal.SIGTERM, request_shutdown)
    try:
        server.run(sys.stdin, sys.stdout, stop_event)
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
