"""
=============================================================================
SYSPROHTTP CLI ENTRY POINT
=============================================================================

Serves one HTTP request from stdin to stdout, then exits.

=============================================================================
USAGE
=============================================================================

    # Serve files under ./public for the connection on stdin/stdout
    python -m sysprohttp ./public

    # Guess Content-Type from file extensions
    python -m sysprohttp --guess-types ./public

    # Try it without a supervisor
    printf 'GET /index.html HTTP/1.0\\r\\n\\r\\n' | python -m sysprohttp ./public

    # Under an inetd-style supervisor (one process per connection)
    http stream tcp nowait www /usr/bin/sysprohttp sysprohttp /var/www

=============================================================================
EXIT STATUS
=============================================================================

    0   A response was written
    1   Fatal error (malformed request, I/O failure); diagnostic on stderr
    2   Usage error

stdout carries the HTTP response, so logging always goes to stderr.
=============================================================================
"""

import argparse
import logging
import os
import sys

from . import __version__
from .config import ServerConfig
from .core import Connection
from .errors import report_fatal


logger = logging.getLogger("sysprohttp")


def main(argv=None):
    """
    Main CLI entry point.

    =========================================================================
    ARGUMENT PARSING
    =========================================================================

    - docroot: Document root (required, positional)
    - --guess-types: Content-Type from file extension
    - --log-level, -l: Logging verbosity
    - --version, -v: Show version

    =========================================================================
    """
    parser = argparse.ArgumentParser(
        prog="sysprohttp",
        description="Serve one HTTP/1.x request from stdin to stdout",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sysprohttp /var/www                       # Serve /var/www
  sysprohttp --guess-types /var/www         # text/html for .html, ...
  sysprohttp -l DEBUG /var/www 2>debug.log  # Verbose diagnostics
        """
    )

    parser.add_argument(
        "docroot",
        help="Document root that request paths are resolved against"
    )

    parser.add_argument(
        "--guess-types",
        action="store_true",
        default=None,
        help="Guess Content-Type from the file extension (default: text/plain)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"sysprohttp {__version__}"
    )

    args = parser.parse_args(argv)

    # =========================================================================
    # CREATE CONFIGURATION
    # =========================================================================
    # Environment first, command line on top

    try:
        config = ServerConfig.from_env(docroot=args.docroot)
        if args.guess_types is not None:
            config.guess_types = args.guess_types
        if args.log_level is not None:
            config.log_level = args.log_level
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    if not os.path.isdir(config.docroot):
        parser.error(f"document root is not a directory: {config.docroot}")

    setup_logging(config.log_level)

    # =========================================================================
    # SERVE ONE REQUEST
    # =========================================================================

    result = Connection(sys.stdin.buffer, sys.stdout.buffer, config).serve()

    if not result.ok:
        if isinstance(result.error.__cause__, BrokenPipeError):
            _silence_stdout()
        sys.exit(report_fatal(result.error, prog=parser.prog))


def setup_logging(log_level: str) -> None:
    """Configure logging to stderr at `log_level`."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    logging.getLogger("sysprohttp").setLevel(level)


def _silence_stdout() -> None:
    """
    Point stdout at /dev/null after the client has gone away.

    Otherwise the interpreter's own flush at exit hits the broken pipe
    again and prints a second, unrelated traceback.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, sys.stdout.fileno())
    finally:
        os.close(devnull)


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    main()
