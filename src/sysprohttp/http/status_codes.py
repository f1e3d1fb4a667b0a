"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The statuses this server can put on the wire, with their reason phrases.

    ┌────────┬──────────────────────────┬──────────────────────────────────┐
    │  Code  │  Phrase                  │  When                            │
    ├────────┼──────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                      │  GET/HEAD of a regular file      │
    │  404   │  Not Found               │  GET/HEAD of anything else       │
    │  405   │  Method Not Allowed      │  POST                            │
    │  501   │  Not Implemented         │  Any other method                │
    └────────┴──────────────────────────┴──────────────────────────────────┘

Malformed requests never get a status at all: they are fatal errors and the
connection is dropped without a response (see errors.py).
=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_IMPLEMENTED = 501

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.0 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def status(self) -> str:
        """Code and phrase as they appear on the status line: "200 OK"."""
        return f"{int(self)} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
