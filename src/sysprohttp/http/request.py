"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads exactly one HTTP/1.x request from a binary stream and turns it into
an HTTPRequest object.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    GET /docs/index.html HTTP/1.1\r\n                           │ │
    │  │    ─┬─ ───────┬──────── ────┬───                               │ │
    │  │     │         │             │                                   │ │
    │  │   Method     Path        Version  (minor = 1)                   │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Host: example.com\r\n                                       │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n   (or a bare \n)                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (only when Content-Length > 0) ──────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. LINES ARE BOUNDED:
   - Every line is read with a fixed limit (line_buffer_size)
   - A line that fills the limit without a terminator is rejected

2. THE REQUEST LINE IS SPLIT ON SINGLE SPACES:
   - "GET /a HTTP/1.0"   → method="GET", path="/a", minor=0
   - "get /a http/1.1"   → method="GET" (upper-cased), minor=1
   - "GET /a"            → error, request line (2)

3. THE PATH IS RAW:
   - Not URL-decoded, not normalized
   - Containment is enforced later, by the file resolver

4. THE BODY IS EXACT:
   - Content-Length missing or 0 → no body (None)
   - Negative, non-numeric or above the cap → error before reading
   - Fewer bytes than announced → error

Every error is an HTTPParseError, which is a FatalError: the request is
abandoned and no HTTP response is written for it.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "Why read line by line instead of scanning for \\r\\n\\r\\n?"
A: "We serve exactly one request per stream, so there is nothing to
   buffer for a next request. Reading lines lets each line be bounded
   and rejected as soon as it is malformed."

Q: "Which header wins when a name is sent twice?"
A: "The last one on the wire. The header store keeps wire order and
   scans backwards on lookup, so the rule is explicit and testable."

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from ..config import ServerConfig
from ..errors import HTTPParseError, RequestBodyError
from .headers import HeaderStore


logger = logging.getLogger(__name__)


# Version tokens must start with this (compared case-insensitively)
HTTP_1_PREFIX = "HTTP/1."

_LEADING_DIGITS = re.compile(r"\d+")
_CONTENT_LENGTH = re.compile(r"^\s*(-?\d+)\s*$")


@dataclass
class HTTPRequest:
    """
    Represents one parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:                  Upper-cased method token ("GET", "HEAD", ...)

        path:                    Raw path token from the request line

        protocol_minor_version:  The <n> of "HTTP/1.<n>"

        headers:                 HeaderStore in wire order

        length:                  Body length from Content-Length (0 if absent)

        body:                    Exactly `length` bytes, or None when length is 0

    =========================================================================
    """

    method: str
    path: str
    protocol_minor_version: int = 0
    headers: HeaderStore = field(default_factory=HeaderStore)
    length: int = 0
    body: Optional[bytes] = None

    @property
    def is_head(self) -> bool:
        """HEAD requests get headers only, never body bytes."""
        return self.method == "HEAD"

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup (last duplicate wins)."""
        value = self.headers.lookup(name)
        return default if value is None else value


class RequestParser:
    """
    Parses one HTTP request from a binary stream.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        Input stream
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  REQUEST PARSER                                                   │
        ├───────────────────────────────────────────────────────────────────┤
        │                                                                    │
        │  1. Read request line ───────────────────────────────────────────►│
        │     │  EOF / too long? → HTTPParseError                           │
        │     ▼                                                             │
        │  2. Split METHOD SP PATH SP VERSION ─────────────────────────────►│
        │     │  Missing field? → HTTPParseError(request line (1|2|3))      │
        │     ▼                                                             │
        │  3. Read "Name: value" lines until an empty line ────────────────►│
        │     │  No colon / EOF? → HTTPParseError(request header)           │
        │     ▼                                                             │
        │  4. Content-Length → length ─────────────────────────────────────►│
        │     │  Negative / junk / > cap? → RequestBodyError                │
        │     ▼                                                             │
        │  5. Read exactly `length` body bytes ────────────────────────────►│
        │     │  Short read? → RequestBodyError                             │
        │     ▼                                                             │
        │  6. Build HTTPRequest ───────────────────────────────────────────►│
        │                                                                    │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the request parser.

        Args:
            config: Supplies line_buffer_size and max_body_length.
        """
        self.config = config or ServerConfig()

    def parse(self, stream: BinaryIO) -> HTTPRequest:
        """
        Read and parse one request from `stream`.

        Args:
            stream: Readable binary stream positioned at a request line.

        Returns:
            A fully populated HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed or truncated.
        """
        # =====================================================================
        # STEP 1: Request line
        # =====================================================================
        line = self._read_line(stream, "request line")
        if not line:
            raise HTTPParseError("no request line", part="request line")

        method, path, minor = self._parse_request_line(line)
        logger.debug(f"Request line: {method} {path} HTTP/1.{minor}")

        # =====================================================================
        # STEP 2: Headers
        # =====================================================================
        headers = self._parse_headers(stream)

        # =====================================================================
        # STEP 3: Body
        # =====================================================================
        length = self._content_length(headers)
        body = None
        if length > 0:
            if length > self.config.max_body_length:
                raise RequestBodyError(
                    f"request body too large: {length} bytes "
                    f"(limit {self.config.max_body_length})"
                )
            body = self._read_body(stream, length)

        return HTTPRequest(
            method=method,
            path=path,
            protocol_minor_version=minor,
            headers=headers,
            length=length,
            body=body,
        )

    def _read_line(self, stream: BinaryIO, part: str) -> str:
        """
        Read one bounded line and decode it as ISO-8859-1.

        Returns "" at end of stream. The line terminator is kept so callers
        can tell an empty line ("\\r\\n") from end of stream ("").
        """
        limit = self.config.line_buffer_size
        try:
            raw = stream.readline(limit)
        except OSError as e:
            raise HTTPParseError(f"failed to read {part}: {e}", part=part) from e

        if len(raw) >= limit and not raw.endswith(b"\n"):
            raise HTTPParseError(
                f"{part} exceeds {limit} bytes", part=part
            )

        # latin-1 maps every byte to one character, so nothing is lost
        return raw.decode("latin-1")

    def _parse_request_line(self, line: str) -> tuple[str, str, int]:
        """
        Split the request line into (method, path, minor version).

        Args:
            line: Request line including its terminator.

        Raises:
            HTTPParseError: Naming which of the three fields failed.
        """
        text = line.rstrip("\r\n")

        # ---------------------------------------------------------------------
        # Field 1: method
        # ---------------------------------------------------------------------
        method, sep, rest = text.partition(" ")
        if not sep or not method:
            raise HTTPParseError(
                f"parse error on request line (1): {text}", part="request line (1)"
            )
        method = _upcase(method)

        # ---------------------------------------------------------------------
        # Field 2: path
        # ---------------------------------------------------------------------
        path, sep, version = rest.partition(" ")
        if not sep:
            raise HTTPParseError(
                f"parse error on request line (2): {text}", part="request line (2)"
            )

        # ---------------------------------------------------------------------
        # Field 3: protocol version
        # ---------------------------------------------------------------------
        if version[:len(HTTP_1_PREFIX)].upper() != HTTP_1_PREFIX:
            raise HTTPParseError(
                f"parse error on request line (3): {text}", part="request line (3)"
            )

        return method, path, _parse_minor(version[len(HTTP_1_PREFIX):])

    def _parse_headers(self, stream: BinaryIO) -> HeaderStore:
        """
        Read header lines up to and including the empty line.

        =====================================================================
        HEADER FORMAT
        =====================================================================

            Name ":" [spaces/tabs] value CRLF

            "Content-Type: text/plain"  → ("Content-Type", "text/plain")
            "X-Empty:"                  → ("X-Empty", "")
            "Host:\\t example.com"       → ("Host", "example.com")

        The name is everything before the first colon, untouched.
        Leading spaces/tabs and the line terminator are cut from the value.

        =====================================================================
        """
        headers = HeaderStore()

        while True:
            line = self._read_line(stream, "request header")
            if not line:
                raise HTTPParseError(
                    "failed to read request header: unexpected end of stream",
                    part="request header",
                )
            if line in ("\n", "\r\n"):
                return headers

            name, sep, value = line.partition(":")
            if not sep:
                raise HTTPParseError(
                    f"parse error on request header: {line.rstrip()}",
                    part="request header",
                )

            headers.insert(name, value.lstrip(" \t").rstrip("\r\n"))

    def _content_length(self, headers: HeaderStore) -> int:
        """
        Body length announced by Content-Length; 0 when the header is absent.

        Raises:
            RequestBodyError: If the value is not an integer or is negative.
        """
        value = headers.lookup("Content-Length")
        if value is None:
            return 0

        match = _CONTENT_LENGTH.match(value)
        if not match:
            raise RequestBodyError(f"invalid Content-Length value: {value!r}")

        length = int(match.group(1))
        if length < 0:
            raise RequestBodyError(f"negative Content-Length value: {length}")
        return length

    def _read_body(self, stream: BinaryIO, length: int) -> bytes:
        """
        Read exactly `length` bytes.

        A single read() may return less on sockets and pipes, so keep
        reading until the count is reached or the stream ends.
        """
        chunks = []
        remaining = length
        try:
            while remaining > 0:
                chunk = stream.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except OSError as e:
            raise RequestBodyError(f"failed to read request body: {e}") from e

        if remaining:
            raise RequestBodyError(
                f"failed to read request body: expected {length} bytes, "
                f"got {length - remaining}"
            )
        return b"".join(chunks)


def _upcase(token: str) -> str:
    """ASCII-only upper-casing; other characters are left as they are."""
    return "".join(c.upper() if c.isascii() else c for c in token)


def _parse_minor(suffix: str) -> int:
    """
    Minor version from the text after "HTTP/1.".

    Leading digits are used ("1", "1abc" → 1); anything else gives 0.
    """
    match = _LEADING_DIGITS.match(suffix.strip())
    return int(match.group()) if match else 0


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(stream: BinaryIO, config: Optional[ServerConfig] = None) -> HTTPRequest:
    """
    Parse one request from `stream` with a throwaway RequestParser.

    Args:
        stream: Readable binary stream.
        config: Limits to apply (defaults if omitted).

    Returns:
        Parsed HTTPRequest.
    """
    return RequestParser(config).parse(stream)
