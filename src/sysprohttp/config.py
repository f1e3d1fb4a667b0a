"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the one-shot HTTP server.

All tunables live in one dataclass so the parser, the writer and the
command line agree on the same numbers:

    ┌──────────────────────┬────────────┬──────────────────────────────────┐
    │  Setting             │  Default   │  Used by                         │
    ├──────────────────────┼────────────┼──────────────────────────────────┤
    │  docroot             │  "."       │  File resolver                   │
    │  line_buffer_size    │  4096      │  Request parser (line bound)     │
    │  max_body_length     │  1 MiB     │  Request parser (body cap)       │
    │  block_size          │  1024      │  Response writer (file copy)     │
    │  http_minor_version  │  0         │  Response writer (status line)   │
    │  guess_types         │  False     │  Content-Type strategy           │
    │  log_level           │  WARNING   │  Entry point                     │
    └──────────────────────┴────────────┴──────────────────────────────────┘

Every value can also come from a SYSPROHTTP_* environment variable, which
is handy when the server is launched by a supervisor that cannot pass
extra arguments.
=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


MAX_REQUEST_BODY_LENGTH = 1024 * 1024

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    FILESYSTEM
    - docroot

    PROTOCOL LIMITS
    - line_buffer_size, max_body_length, block_size

    SERVER IDENTITY
    - server_name, server_version, http_minor_version

    CONTENT TYPES
    - guess_types

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILESYSTEM
    # ─────────────────────────────────────────────────────────────────────

    docroot: str = "."
    """
    Directory that request paths are resolved against.
    Files outside it are never served.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROTOCOL LIMITS
    # ─────────────────────────────────────────────────────────────────────

    line_buffer_size: int = 4096
    """
    Longest request line or header line accepted, terminator included.
    """

    max_body_length: int = MAX_REQUEST_BODY_LENGTH
    """
    Largest request body accepted (Content-Length), in bytes.
    """

    block_size: int = 1024
    """
    Block size used when copying a file to the client.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "sysproHTTP"
    server_version: str = "1.0"

    http_minor_version: int = 0
    """
    Minor version used in the response status line (HTTP/1.<minor>).
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT TYPES
    # ─────────────────────────────────────────────────────────────────────

    guess_types: bool = False
    """
    False: every file is served as text/plain.
    True: Content-Type is looked up from the file extension.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR).
    Logs always go to stderr; stdout carries the response.
    """

    @property
    def server_header(self) -> str:
        """Value of the Server response header, e.g. "sysproHTTP/1.0"."""
        return f"{self.server_name}/{self.server_version}"

    @classmethod
    def from_env(cls, docroot: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SYSPROHTTP_DOCROOT            Document root (default: .)
        SYSPROHTTP_LINE_BUFFER_SIZE   Line bound (default: 4096)
        SYSPROHTTP_MAX_BODY_LENGTH    Body cap (default: 1048576)
        SYSPROHTTP_BLOCK_SIZE         Copy block size (default: 1024)
        SYSPROHTTP_GUESS_TYPES        1/true/yes/on to guess by extension
        SYSPROHTTP_LOG_LEVEL          Logging level (default: WARNING)

        =====================================================================

        Args:
            docroot: Explicit document root; overrides SYSPROHTTP_DOCROOT.

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        return cls(
            docroot=docroot or os.getenv("SYSPROHTTP_DOCROOT", "."),
            line_buffer_size=_env_int("SYSPROHTTP_LINE_BUFFER_SIZE", 4096),
            max_body_length=_env_int("SYSPROHTTP_MAX_BODY_LENGTH", MAX_REQUEST_BODY_LENGTH),
            block_size=_env_int("SYSPROHTTP_BLOCK_SIZE", 1024),
            guess_types=os.getenv("SYSPROHTTP_GUESS_TYPES", "").lower() in _TRUE_VALUES,
            log_level=os.getenv("SYSPROHTTP_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before any byte of the
        request is consumed.
        """
        if not self.docroot:
            raise ValueError("docroot must not be empty")

        if self.line_buffer_size < 16:
            raise ValueError("line_buffer_size must be >= 16")

        if self.max_body_length < 0:
            raise ValueError("max_body_length must be >= 0")

        if self.block_size < 1:
            raise ValueError("block_size must be >= 1")

        if self.http_minor_version < 0:
            raise ValueError("http_minor_version must be >= 0")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")


def _env_int(name: str, default: int) -> int:
    """Integer environment variable; a malformed value raises ValueError naming it."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
