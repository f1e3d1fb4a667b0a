"""
=============================================================================
FATAL ERRORS
=============================================================================

Two kinds of failure exist in this server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ERROR TIERS                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLIENT-VISIBLE                   FATAL                             │
    │   ──────────────                   ─────                             │
    │                                                                      │
    │   404 Not Found                    Malformed request line/header    │
    │   405 Method Not Allowed           Bad / oversized / short body      │
    │   501 Not Implemented              I/O failure while responding     │
    │                                                                      │
    │   Written as a normal response     No response is produced; the     │
    │                                    unit of work ends right here     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Fatal errors are exceptions inside the core. The connection layer turns
them into a ServiceResult, and only the command-line entry point turns that
result into a diagnostic line and a non-zero exit status.
=============================================================================
"""

import sys
from typing import Optional, TextIO


class FatalError(Exception):
    """
    Base class for conditions that abort the current request.

    Carries a human-readable message suitable for the diagnostic stream.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class HTTPParseError(FatalError):
    """
    Raised when the inbound request cannot be parsed.

    `part` names the piece of the request that failed ("request line (2)",
    "request header", ...) so diagnostics point at the broken field.
    """

    def __init__(self, message: str, part: Optional[str] = None):
        super().__init__(message)
        self.part = part


class RequestBodyError(HTTPParseError):
    """Raised for an invalid, oversized or truncated request body."""

    def __init__(self, message: str):
        super().__init__(message, part="request body")


class ResponseWriteError(FatalError):
    """
    Raised when the response cannot be produced after writing has begun.

    Headers may already have reached the client, so the response on the
    wire is left truncated. There is no rollback.
    """


def report_fatal(
    error: FatalError,
    stream: Optional[TextIO] = None,
    prog: str = "sysprohttp",
) -> int:
    """
    Write a one-line diagnostic for `error` and return the exit status.

    Args:
        error: The fatal error to report.
        stream: Diagnostic stream (default: sys.stderr at call time).
        prog: Program name prefix.

    Returns:
        Exit status for the process (always 1).
    """
    stream = stream if stream is not None else sys.stderr
    print(f"{prog}: {error.message}", file=stream)
    stream.flush()
    return 1
