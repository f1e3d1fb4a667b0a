"""
=============================================================================
SYSPROHTTP - One-Shot HTTP/1.x Static File Server
=============================================================================

Serves exactly one HTTP request per process over already-connected byte
streams (stdin/stdout), the way a server started per connection by an
inetd-style supervisor does.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    SYSPROHTTP ARCHITECTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   stdin ──► RequestParser ──► HTTPRequest                           │
    │                                    │                                 │
    │                                    ▼                                 │
    │                               Dispatcher                             │
    │                         GET/HEAD │    │ POST / other                 │
    │                                  ▼    ▼                              │
    │                        FileResolver   405 / 501                      │
    │                                  │    │                              │
    │                                  ▼    ▼                              │
    │                             ResponseWriter ──► stdout                │
    │                                                                      │
    │   Any malformed input or I/O failure is a FatalError: no response, │
    │   a diagnostic on stderr, exit status 1.                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    sysprohttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m sysprohttp DOCROOT)
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # FatalError hierarchy + report_fatal
    ├── core/
    │   ├── connection.py    # One request/response cycle, ServiceResult
    │   └── dispatcher.py    # Method → action table
    ├── http/
    │   ├── headers.py       # HeaderStore
    │   ├── request.py       # HTTPRequest + RequestParser
    │   ├── response.py      # HTTPResponse + ResponseWriter
    │   ├── status_codes.py  # HTTPStatus enum
    │   └── mime_types.py    # Content-Type strategies
    └── handlers/
        └── static.py        # FileResolver + FileInfo

=============================================================================
QUICK START
=============================================================================

    import io
    from sysprohttp import ServerConfig, service

    request = io.BytesIO(b"GET /hello.txt HTTP/1.0\\r\\n\\r\\n")
    response = io.BytesIO()

    result = service(request, response, ServerConfig(docroot="./public"))
    print(result.status)          # HTTPStatus.OK or HTTPStatus.NOT_FOUND
    print(response.getvalue())    # the raw response bytes

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .core import Connection, Dispatcher, ServiceResult, service
from .errors import FatalError, HTTPParseError, RequestBodyError, ResponseWriteError

__all__ = [
    "Connection",
    "Dispatcher",
    "FatalError",
    "HTTPParseError",
    "RequestBodyError",
    "ResponseWriteError",
    "ServerConfig",
    "ServiceResult",
    "service",
    "__version__",
]
