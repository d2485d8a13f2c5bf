"""
=============================================================================
STATIC SERVER CLI ENTRY POINT
=============================================================================

    # Serve ~/public_html on port 8080
    python -m staticserver 8080 ~/public_html

    # Only on localhost, with debug logging
    python -m staticserver 8080 ./site --host 127.0.0.1 --log-level DEBUG

    # JSON access logs, 10 second keep-alive
    python -m staticserver 8080 ./site --log-format json --timeout 10

The installed console script `staticserver` takes the same arguments.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Minimal HTTP/1.1 static file server (GET and HEAD)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserver 8080 ~/public_html
  python -m staticserver 8080 ./site --host 127.0.0.1
        """
    )

    parser.add_argument(
        "port",
        type=int,
        help="Port to listen on"
    )

    parser.add_argument(
        "root",
        help="Document root; a leading ~ expands to your home directory"
    )

    parser.add_argument(
        "--host", "-H",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=3.0,
        help="Keep-alive idle timeout in seconds (default: 3)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"StaticServer {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        keep_alive_timeout=args.timeout,
        log_level=args.log_level,
        log_format=args.log_format,
    ).with_root(args.root)

    try:
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"StaticServer started on port {config.port} serving from: {config.document_root or '/'}")

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
