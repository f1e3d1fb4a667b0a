"""
=============================================================================
CONTENT-TYPE GUESSING
=============================================================================

The Content-Type of a file response is decided by a pluggable strategy:
any callable that takes a FileInfo and returns a MIME type string.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    AVAILABLE STRATEGIES                            │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  guess_content_type   → always "text/plain"  (default)             │
    │  guess_by_extension   → looked up in MIME_TYPES by suffix          │
    │                         ".html" → text/html                        │
    │                         ".png"  → image/png                        │
    │                         ".xyz"  → application/octet-stream         │
    │                                                                     │
    │  Anything else        → pass your own callable to the Dispatcher   │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The default keeps every file as text/plain; `--guess-types` on the command
line (or SYSPROHTTP_GUESS_TYPES=1) switches to the extension table.
=============================================================================
"""

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Union

from ..config import ServerConfig

if TYPE_CHECKING:
    from ..handlers.static import FileInfo


ContentTypeGuesser = Callable[["FileInfo"], str]


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Maps file extensions (lowercase, with dot) to MIME types.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",

    # -------------------------------------------------------------------------
    # FONTS, MEDIA AND DOCUMENTS
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".pdf": "application/pdf",

    # -------------------------------------------------------------------------
    # ARCHIVES
    # -------------------------------------------------------------------------
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
}

# Fallback for extensions missing from the table
DEFAULT_MIME_TYPE = "application/octet-stream"

# What every file is served as when no guessing is configured
PLAIN_TEXT = "text/plain"


def get_mime_type(path: Union[str, Path]) -> str:
    """
    Look up the MIME type for a file name by its extension.

    Examples:
        >>> get_mime_type("style.CSS")
        'text/css'

        >>> get_mime_type("unknown.xyz")
        'application/octet-stream'
    """
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def guess_content_type(info: "FileInfo") -> str:
    """Default strategy: every file is text/plain."""
    return PLAIN_TEXT


def guess_by_extension(info: "FileInfo") -> str:
    """Strategy that maps the file extension through MIME_TYPES."""
    return get_mime_type(info.path)


def select_guesser(config: ServerConfig) -> ContentTypeGuesser:
    """Pick the strategy named by `config.guess_types`."""
    return guess_by_extension if config.guess_types else guess_content_type
