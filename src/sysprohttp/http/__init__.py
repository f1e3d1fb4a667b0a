"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

Everything that touches HTTP/1.x syntax:

    headers.py       - HeaderStore (ordered, case-insensitive, last wins)
    request.py       - HTTPRequest + RequestParser (stream → request)
    response.py      - HTTPResponse + ResponseWriter (request → bytes)
    status_codes.py  - HTTPStatus enum with reason phrases
    mime_types.py    - Content-Type strategies

=============================================================================
"""

from .headers import HeaderStore
from .request import HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, ResponseWriter, format_http_date
from .status_codes import HTTPStatus
from .mime_types import (
    ContentTypeGuesser,
    get_mime_type,
    guess_by_extension,
    guess_content_type,
)

__all__ = [
    # Headers
    "HeaderStore",

    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "parse_request",

    # Response writing
    "HTTPResponse",
    "ResponseWriter",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # Content types
    "ContentTypeGuesser",
    "get_mime_type",
    "guess_by_extension",
    "guess_content_type",
]
