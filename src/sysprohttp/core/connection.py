"""
=============================================================================
CONNECTION SERVICE
=============================================================================

One connection, one request, one response.

The input and output streams are already connected to the client (for
example stdin/stdout of a process started by an inetd-style supervisor).
This module runs the whole request lifecycle over them:

    ┌─────────────────────────────────────────────────────────────────┐
    │                        serve()                                   │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED          │
    │              │            │              │                       │
    │           parser      dispatcher      writer                     │
    │              │                           │                       │
    │              └──── FatalError ───────────┘                       │
    │                        │                                         │
    │                        ▼                                         │
    │              ServiceResult(error=...)   (no exit, no response)   │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

A fatal error never terminates anything from here. It comes back as a
ServiceResult and the caller decides: the command line prints it and
exits 1, a long-lived host would log it and close the connection.
=============================================================================
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

from ..config import ServerConfig
from ..errors import FatalError
from ..http.mime_types import ContentTypeGuesser, select_guesser
from ..http.request import HTTPRequest, RequestParser
from ..http.response import ResponseWriter
from ..http.status_codes import HTTPStatus
from .dispatcher import Dispatcher


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Nothing read yet
    READING = "reading"        # Parsing the request
    PROCESSING = "processing"  # Dispatching
    WRITING = "writing"        # Response being written
    CLOSED = "closed"          # Done, successfully or not


@dataclass
class ServiceResult:
    """
    Outcome of serving one connection.

    Exactly one of `status` and `error` is set.
    """

    status: Optional[HTTPStatus] = None
    error: Optional[FatalError] = None
    request: Optional[HTTPRequest] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Connection:
    """
    A client connection given as a pair of binary streams.

    Attributes:
        rfile: Stream the request is read from.
        wfile: Stream the response is written to.
        config: Server configuration.
        id: Short identifier used as a log prefix.
        state: Current lifecycle state.
    """

    rfile: BinaryIO
    wfile: BinaryIO
    config: ServerConfig = field(default_factory=ServerConfig)

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def serve(
        self,
        dispatcher: Optional[Dispatcher] = None,
        content_type: Optional[ContentTypeGuesser] = None,
    ) -> ServiceResult:
        """
        Read one request and write its response.

        Args:
            dispatcher: Method dispatcher (built from config if omitted).
            content_type: Content-Type strategy (chosen from config if omitted).

        Returns:
            ServiceResult with the written status, or the fatal error.
        """
        dispatcher = dispatcher or Dispatcher(self.config)
        writer = ResponseWriter(
            self.wfile,
            self.config,
            content_type=content_type or select_guesser(self.config),
        )
        request = None

        try:
            # ─────────────────────────────────────────────────────────────
            # READ
            # ─────────────────────────────────────────────────────────────
            self.state = ConnectionState.READING
            request = RequestParser(self.config).parse(self.rfile)

            # ─────────────────────────────────────────────────────────────
            # DISPATCH + WRITE
            # ─────────────────────────────────────────────────────────────
            self.state = ConnectionState.PROCESSING
            logger.debug(f"[{self.id}] {request.method} {request.path} "
                         f"HTTP/1.{request.protocol_minor_version}")

            self.state = ConnectionState.WRITING
            status = dispatcher.dispatch(request, writer)

        except FatalError as e:
            logger.debug(f"[{self.id}] {e.message}")
            return ServiceResult(error=e, request=request)

        finally:
            self.state = ConnectionState.CLOSED

        elapsed_ms = (time.time() - self.created_at) * 1000
        logger.info(
            f"[{self.id}] {request.method} {request.path} {int(status)} "
            f"{writer.body_bytes}b {elapsed_ms:.1f}ms"
        )
        return ServiceResult(status=status, request=request)


def service(
    rfile: BinaryIO,
    wfile: BinaryIO,
    config: Optional[ServerConfig] = None,
) -> ServiceResult:
    """
    Serve one request from `rfile` to `wfile`.

    Convenience wrapper around Connection(...).serve().
    """
    return Connection(rfile, wfile, config or ServerConfig()).serve()
