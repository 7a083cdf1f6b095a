#!/usr/bin/env python3
"""
Chat Client Application

Terminal client for a line based chat server. Settings come from the
environment (see ``linechat.config``) and can be overridden on the
command line.

Usage:
    linechat --host localhost --port 1300
    linechat --transport websocket --port 8080
"""

import argparse
import logging
import sys
from typing import List, Optional

from .chat_client import ChatClient
from .config import ClientConfig
from .console import USAGE, ConsoleListener, ConsoleSession
from .errors import ConnectError
from .transport import TRANSPORTS, get_transport_factory

logger = logging.getLogger(__name__)


def build_parser(config: ClientConfig) -> argparse.ArgumentParser:
    """Create the argument parser with defaults taken from config."""
    parser = argparse.ArgumentParser(description="Line chat client")
    parser.add_argument("--host", default=config.host, help="Server host")
    parser.add_argument(
        "--port", type=int, default=config.port, help="Server port"
    )
    parser.add_argument(
        "--transport",
        default=config.transport,
        choices=sorted(TRANSPORTS),
        help="Transport used to reach the server",
    )
    parser.add_argument(
        "--log-level", default=config.log_level, help="Logging level"
    )
    parser.add_argument(
        "--log-file",
        default=config.log_file,
        help="Log file path (empty string logs to stderr)",
    )
    return parser


def configure_logging(level: str, log_file: str) -> None:
    """Configure root logging; a file keeps logs out of the chat output."""
    handlers: List[logging.Handler]
    if log_file:
        handlers = [logging.FileHandler(log_file, mode="a")]
    else:
        handlers = [logging.StreamHandler(sys.stderr)]
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the chat client."""
    try:
        config = ClientConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    args = build_parser(config).parse_args(argv)
    try:
        # argparse does not check choices against environment defaults
        transport_factory = get_transport_factory(args.transport)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(args.log_level, args.log_file)
    logger.info("Starting chat client...")

    client = ChatClient(transport_factory)
    client.add_listener(ConsoleListener())

    try:
        client.connect(args.host, args.port)
    except ConnectError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Connected to {args.host}:{args.port}. {USAGE}")
    session = ConsoleSession(client)
    try:
        for line in sys.stdin:
            if not session.handle_input(line):
                break
            if not client.is_active:
                break
    except KeyboardInterrupt:
        print("\nExiting...")
    finally:
        client.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
