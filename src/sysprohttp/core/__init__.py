"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps the already-connected input/output streams                 │
    │  • Runs NEW → READING → PROCESSING → WRITING → CLOSED once          │
    │  • Turns fatal errors into a ServiceResult instead of exiting       │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Parsed request
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          DISPATCHER                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • GET / HEAD → file response (200 or 404)                          │
    │  • POST → 405, everything else → 501                                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState, ServiceResult, service
from .dispatcher import Dispatcher

__all__ = [
    "Connection",
    "ConnectionState",
    "Dispatcher",
    "ServiceResult",
    "service",
]
