"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Writes exactly one HTTP/1.x response to a binary output stream.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ COMMON HEADER BLOCK (every response) ─────────────────────────┐ │
    │  │                                                                 │ │
    │  │    HTTP/1.0 200 OK\r\n                                         │ │
    │  │    Date: Sun, 18 Oct 2026 12:00:00 GMT\r\n                     │ │
    │  │    Server: sysproHTTP/1.0\r\n                                  │ │
    │  │    Connection: close\r\n                                       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ RESPONSE-SPECIFIC HEADERS ────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Content-Length: 1234\r\n                                    │ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    file bytes, copied block by block   (200)                    │ │
    │  │    small HTML page                     (404 / 405 / 501)        │ │
    │  │    nothing at all                      (any HEAD request)       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STREAMING
=============================================================================

File bodies are never loaded whole. The header block is written first,
then the file is copied in block_size chunks:

    open(file) ──► read(1024) ──► out.write() ──► read(1024) ──► ... ──► EOF
                                                                          │
                                                                     out.flush()

Once the header block is out there is no way to take it back. A read or
write failure halfway through raises ResponseWriteError and the client is
left with a truncated response.

=============================================================================
"""

import html
import logging
import os
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, BinaryIO, Callable, Dict, Optional

from ..config import ServerConfig
from ..errors import ResponseWriteError
from .mime_types import ContentTypeGuesser, guess_content_type
from .request import HTTPRequest
from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from ..handlers.static import FileInfo


logger = logging.getLogger(__name__)

# Not available on Windows
_O_NOFOLLOW = getattr(os, "O_NOFOLLOW", 0)


@dataclass
class HTTPResponse:
    """
    Status line, headers and an in-memory body.

    Used for the header block of every response and for the small HTML
    error pages. File bodies are streamed separately by ResponseWriter.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.0"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.0 404 Not Found"
        """
        return f"{self.version} {self.status.status}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def head_bytes(self) -> bytes:
        """Status line, headers and the terminating empty line."""
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("latin-1")

    def to_bytes(self, include_body: bool = True) -> bytes:
        """Complete response; the body is dropped when include_body is False."""
        return self.head_bytes() + (self.body if include_body else b"")


class ResponseWriter:
    """
    Writes responses to one output stream.

    ==========================================================================
    USAGE
    ==========================================================================

        writer = ResponseWriter(sys.stdout.buffer, config)

        info = resolver.resolve(request.path)
        if info.ok:
            writer.send_file(request, info)
        else:
            writer.send_not_found(request)

    Every send_* method writes a complete response and flushes the stream
    before returning.

    ==========================================================================
    """

    def __init__(
        self,
        out: BinaryIO,
        config: Optional[ServerConfig] = None,
        content_type: Optional[ContentTypeGuesser] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the writer.

        Args:
            out: Writable binary stream connected to the client.
            config: Server identity, protocol version and block size.
            content_type: Content-Type strategy for file responses.
            clock: Returns the current UTC time (for the Date header).
        """
        self.out = out
        self.config = config or ServerConfig()
        self.content_type = content_type or guess_content_type
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.body_bytes = 0

    # =========================================================================
    # HEADER BLOCK
    # =========================================================================

    def common_headers(self, status: HTTPStatus) -> HTTPResponse:
        """
        Start a response with the headers every response carries.

        Date, Server and Connection: close, in that order.
        """
        return HTTPResponse(
            status=status,
            version=f"HTTP/1.{self.config.http_minor_version}",
            headers={
                "Date": format_http_date(self.clock()),
                "Server": self.config.server_header,
                "Connection": "close",
            },
        )

    # =========================================================================
    # RESPONSES
    # =========================================================================

    def send_file(self, request: HTTPRequest, info: "FileInfo") -> HTTPStatus:
        """
        200 OK with the file's bytes (headers only for HEAD).

        Args:
            request: The parsed request (only its method is consulted).
            info: A FileInfo with ok=True.

        Raises:
            ResponseWriteError: If the file or the stream fails.
        """
        response = self.common_headers(HTTPStatus.OK)
        response.set_header("Content-Length", str(info.size))
        response.set_header("Content-Type", self.content_type(info))

        if request.is_head:
            self._write(response.head_bytes())
        else:
            # Opened before the header block goes out
            source = self._open_regular(info.path)
            with source:
                self._write(response.head_bytes())
                self._copy(source, info.path)

        self._flush()
        return HTTPStatus.OK

    def send_not_found(self, request: HTTPRequest) -> HTTPStatus:
        """404 Not Found with a short HTML page."""
        return self._send_page(
            request, HTTPStatus.NOT_FOUND, "Not Found", "File not found"
        )

    def send_method_not_allowed(self, request: HTTPRequest) -> HTTPStatus:
        """405 Method Not Allowed naming the rejected method."""
        return self._send_page(
            request,
            HTTPStatus.METHOD_NOT_ALLOWED,
            "405 Method Not Allowed",
            f"The request method {html.escape(request.method)} is not allowed",
        )

    def send_not_implemented(self, request: HTTPRequest) -> HTTPStatus:
        """501 Not Implemented naming the unknown method."""
        return self._send_page(
            request,
            HTTPStatus.NOT_IMPLEMENTED,
            "501 Not Implemented",
            f"The request method {html.escape(request.method)} is not implemented",
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _send_page(
        self,
        request: HTTPRequest,
        status: HTTPStatus,
        title: str,
        message: str,
    ) -> HTTPStatus:
        """
        Write an HTML response.

        HEAD gets the same headers, Content-Length included, but no body.
        """
        response = self.common_headers(status)
        response.body = html_page(title, message).encode("utf-8")
        response.set_header("Content-Type", "text/html")
        response.set_header("Content-Length", str(len(response.body)))

        include_body = not request.is_head
        self._write(response.to_bytes(include_body=include_body))
        if include_body:
            self.body_bytes += len(response.body)
        self._flush()
        return status

    def _open_regular(self, path: str) -> BinaryIO:
        """
        Open `path` for reading without following a final symlink.

        The descriptor is checked again with fstat, so a file swapped for a
        symlink or a directory after resolution is refused.

        Raises:
            ResponseWriteError: If the path cannot be opened as a regular file.
        """
        try:
            fd = os.open(path, os.O_RDONLY | _O_NOFOLLOW)
        except OSError as e:
            raise ResponseWriteError(f"failed to open {path}: {e}") from e

        try:
            mode = os.fstat(fd).st_mode
        except OSError as e:
            os.close(fd)
            raise ResponseWriteError(f"failed to stat {path}: {e}") from e

        if not stat.S_ISREG(mode):
            os.close(fd)
            raise ResponseWriteError(f"failed to open {path}: not a regular file")

        return os.fdopen(fd, "rb")

    def _copy(self, source: BinaryIO, path: str) -> None:
        """Copy `source` to the output in block_size chunks."""
        block_size = self.config.block_size
        while True:
            try:
                block = source.read(block_size)
            except OSError as e:
                raise ResponseWriteError(f"failed to read {path}: {e}") from e
            if not block:
                return
            self._write(block)
            self.body_bytes += len(block)

    def _write(self, data: bytes) -> None:
        try:
            self.out.write(data)
        except OSError as e:
            # BrokenPipeError lands here when the client has gone away
            raise ResponseWriteError(f"failed to write to client: {e}") from e

    def _flush(self) -> None:
        try:
            self.out.flush()
        except OSError as e:
            raise ResponseWriteError(f"failed to flush response: {e}") from e


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 1123).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 18 Oct 2026 12:00:00 GMT

    Day and month names are always English, whatever the locale.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def html_page(title: str, message: str) -> str:
    """Minimal HTML document used for error responses."""
    return (
        "<html>\r\n"
        f"<head><title>{title}</title></head>\r\n"
        f"<body><p>{message}</p></body>\r\n"
        "</html>\r\n"
    )
