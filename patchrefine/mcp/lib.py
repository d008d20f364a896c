"""Core MCP server logic for patchrefine.

Provides configuration, version info and the in-process session store
used by the server tools.
"""

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum

from patchrefine.config import EnvVar, get_environment, get_session_limit
from patchrefine.models import ParsedRack, Patch
from patchrefine.session import RefinementSession

logger = logging.getLogger(__name__)


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass
class ServerConfig:
    """Configuration for MCP server.

    Attributes:
        name: Server display name.
        transport: Transport type for communication.
        host: Bind address for HTTP/SSE transports.
        port: Port for HTTP/SSE transports.
        path: URL path for HTTP transport.
    """

    name: str = "patchrefine"
    transport: TransportType = TransportType.STDIO
    host: str = "0.0.0.0"
    port: int = 18090
    path: str = "/mcp"

    @classmethod
    def from_env(
        cls,
        transport: TransportType | None = None,
    ) -> "ServerConfig":
        """Create config from environment variables.

        Args:
            transport: Override transport type (default: STDIO).

        Returns:
            ServerConfig with values from environment.
        """
        return cls(
            name="patchrefine",
            transport=transport or TransportType.STDIO,
            host=get_environment(EnvVar.MCP_HOST),
            port=get_environment(EnvVar.MCP_PORT),
        )


def get_server_version() -> str:
    """Get server version string."""
    return "0.1.0"


def get_server_capabilities() -> dict:
    """Get server capabilities for MCP protocol."""
    return {
        "tools": True,
        "resources": True,
        "prompts": False,
        "logging": True,
    }


# =============================================================================
# Session Store
# =============================================================================


class SessionStore:
    """Bounded, thread-safe store of chat sessions.

    Sessions are kept in least-recently-used order; creating a session past
    the limit evicts the one untouched for longest.

    Args:
        limit: Maximum live sessions. Defaults to MCP_SESSION_LIMIT.
    """

    def __init__(self, limit: int | None = None):
        self._limit = get_session_limit(limit)
        self._sessions: OrderedDict[str, RefinementSession] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    def create(self, patch: Patch, rack: ParsedRack) -> tuple[str, RefinementSession]:
        """Start a session and return its id with the session."""
        session_id = uuid.uuid4().hex
        session = RefinementSession(patch, rack)
        with self._lock:
            self._sessions[session_id] = session
            while len(self._sessions) > self._limit:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted session {evicted}")
        return session_id, session

    def get(self, session_id: str) -> RefinementSession:
        """Look up a session, marking it recently used.

        Raises:
            ValueError: If the session does not exist or was evicted.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise ValueError(f"Session '{session_id}' not found")
            self._sessions.move_to_end(session_id)
            return session

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions


__all__ = [
    "TransportType",
    "ServerConfig",
    "SessionStore",
    "get_server_version",
    "get_server_capabilities",
]
