"""
=============================================================================
PREVIEW SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 127.0.0.1:8080
    python -m previewserver

    # Serve a build directory on another port
    python -m previewserver ./_build --addr 127.0.0.1:3000

    # Reachable from other machines, plain output
    python -m previewserver ./_build --addr 0.0.0.0:8080 --no-color

Exit codes:

    0   stopped with Ctrl+C
    1   could not bind the address (port in use, permission denied)
    2   invalid arguments, including a malformed --addr

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import BindConfigurationError
from .core import ServerStartError
from .server import PreviewServer


DEFAULT_ADDRESS = "127.0.0.1:8080"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="previewserver",
        description="Serve a directory of static files over HTTP for local preview",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m previewserver                        # Serve . on 127.0.0.1:8080
  python -m previewserver ./_build               # Serve a build directory
  python -m previewserver --addr [::1]:3000      # IPv6 loopback, port 3000
        """
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to serve (default: current directory)"
    )

    parser.add_argument(
        "--addr", "-a",
        default=DEFAULT_ADDRESS,
        help=f"Address to bind as HOST:PORT (default: {DEFAULT_ADDRESS})"
    )

    parser.add_argument(
        "--no-color",
        dest="color",
        action="store_false",
        help="Never use colors in terminal output"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"previewserver {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        server = PreviewServer(
            args.addr,
            args.root,
            color_output=args.color,
            log_level=args.log_level,
        )
    except BindConfigurationError as e:
        parser.error(str(e))  # exits with status 2

    try:
        server.run()
    except ServerStartError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
