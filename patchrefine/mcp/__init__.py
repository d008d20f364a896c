"""MCP (Model Context Protocol) server for patchrefine.

Exposes patch refinement and chat sessions to LLM clients.

Example:
    # Start server in STDIO mode
    >>> from patchrefine.mcp import run_server
    >>> run_server()

    # Create server for testing
    >>> from patchrefine.mcp import create_server
    >>> server = create_server()

Available Tools:
    - refine_patch: Stateless one-message refinement
    - check_intents: Detect save / start fresh / variations / undo
    - start_session, send_message, undo, get_session_history: Chat sessions
    - status: Server status
"""

from .lib import (
    ServerConfig,
    SessionStore,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, get_session_store, mcp, run_server

__all__ = [
    # Server instance
    "mcp",
    "create_server",
    "run_server",
    "get_session_store",
    # Configuration
    "ServerConfig",
    "TransportType",
    "SessionStore",
    # Utilities
    "get_server_version",
    "get_server_capabilities",
]
