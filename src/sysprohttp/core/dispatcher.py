"""
=============================================================================
METHOD DISPATCHER
=============================================================================

Routes a parsed request to exactly one response-producing action.
There is no per-path routing: the method alone decides.

    ┌──────────────┬───────────────────────────────────────────────────────┐
    │  Method      │  Action                                               │
    ├──────────────┼───────────────────────────────────────────────────────┤
    │  GET         │  resolve file → 200 with body, or 404                 │
    │  HEAD        │  resolve file → 200 headers only, or 404 headers only │
    │  POST        │  405 Method Not Allowed                               │
    │  (other)     │  501 Not Implemented                                  │
    └──────────────┴───────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
from typing import Callable, Dict, Optional

from ..config import ServerConfig
from ..handlers.static import FileResolver
from ..http.request import HTTPRequest
from ..http.response import ResponseWriter
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

Action = Callable[[HTTPRequest, ResponseWriter], HTTPStatus]


class Dispatcher:
    """
    Single-shot method dispatcher.

    Example:
        dispatcher = Dispatcher(config)
        status = dispatcher.dispatch(request, writer)
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        resolver: Optional[FileResolver] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Server configuration (document root).
            resolver: File resolver; built from config.docroot if omitted.
        """
        self.config = config or ServerConfig()
        self.resolver = resolver or FileResolver(self.config.docroot)

        # Method → action. Anything missing falls through to 501.
        self._actions: Dict[str, Action] = {
            "GET": self.file_response,
            "HEAD": self.file_response,
            "POST": self.method_not_allowed,
        }

    @property
    def methods(self) -> list[str]:
        """Methods with an explicit entry in the table."""
        return list(self._actions)

    def dispatch(self, request: HTTPRequest, writer: ResponseWriter) -> HTTPStatus:
        """
        Write the response for `request`.

        Returns:
            The status that was written.

        Raises:
            ResponseWriteError: If writing the response fails.
        """
        action = self._actions.get(request.method, self.not_implemented)
        logger.debug(f"Dispatching {request.method} to {action.__name__}")
        return action(request, writer)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def file_response(self, request: HTTPRequest, writer: ResponseWriter) -> HTTPStatus:
        """Serve the file named by the request path, or 404."""
        info = self.resolver.resolve(request.path)
        if not info.ok:
            return writer.send_not_found(request)
        return writer.send_file(request, info)

    def method_not_allowed(self, request: HTTPRequest, writer: ResponseWriter) -> HTTPStatus:
        return writer.send_method_not_allowed(request)

    def not_implemented(self, request: HTTPRequest, writer: ResponseWriter) -> HTTPStatus:
        return writer.send_not_implemented(request)
