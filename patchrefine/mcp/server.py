"""FastMCP server instance for patchrefine.

This module provides the MCP server that exposes conversational patch
refinement to LLM clients. Two workflows are supported:

    1. refine_patch: stateless, one patch + one feedback message
    2. start_session / send_message / undo: a chat session that keeps undo
       history and routes save, start fresh and variation requests

Usage:
    # STDIO mode (for Claude Desktop)
    python -m patchrefine.mcp.server

    # HTTP mode
    python -m patchrefine.mcp.server --transport http --port 18090

    # Via CLI
    python . mcp serve
"""

import argparse
import json
import logging
import sys
from functools import lru_cache
from typing import Any

from fastmcp import FastMCP
from pydantic import ValidationError

from patchrefine.config import get_history_size
from patchrefine.core.log import setup_logging
from patchrefine.models import ParsedRack, Patch

from .lib import (
    SessionStore,
    TransportType,
    get_server_capabilities,
    get_server_version,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Validation Helpers (Internal)
# =============================================================================


def _load_patch(patch: dict[str, Any]) -> Patch:
    """Parse a patch document, raising ValueError on a malformed payload."""
    try:
        return Patch.model_validate(patch)
    except ValidationError as e:
        raise ValueError(f"Invalid patch: {e.error_count()} validation error(s)") from e


def _load_rack(rack: dict[str, Any]) -> ParsedRack:
    """Parse a rack document, raising ValueError on a malformed payload."""
    try:
        return ParsedRack.model_validate(rack)
    except ValidationError as e:
        raise ValueError(f"Invalid rack: {e.error_count()} validation error(s)") from e


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Process-wide session store, sized from MCP_SESSION_LIMIT."""
    return SessionStore()


# =============================================================================
# Server Instructions (LLM Guidance)
# =============================================================================

SERVER_INSTRUCTIONS = """\
## Patch Refinement MCP Server

Refines Eurorack patches from plain-language feedback ("make it darker",
"add reverb", "set cutoff to 2kHz") using only the modules in the user's rack.

### Quick Start
1. `status()` → check readiness
2. `start_session(patch, rack)` → get a session_id
3. `send_message(session_id, "make it darker")` → refined patch + reply
4. `send_message(session_id, "perfect, save it")` → named patch to persist

### Tools
- `refine_patch(patch, feedback, rack)` - One-off refinement, no session
- `check_intents(message)` - Detect save / start fresh / variations / undo
- `start_session(patch, rack)` - Begin a chat session
- `send_message(session_id, message)` - Handle one chat turn
- `undo(session_id)` - Revert the last refinement
- `get_session_history(session_id)` - Snapshots, changes and conversation

### Notes
- Replies that are questions have `needsClarification: true`; ask the user.
- Requests needing a module the rack lacks return `impossibleRequest: true`.
- Saving never writes anywhere: persist the returned patch yourself.
"""

# =============================================================================
# Server Instance
# =============================================================================

mcp = FastMCP(
    name="patchrefine",
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Refinement Tools
# =============================================================================


@mcp.tool
def refine_patch(
    patch: dict[str, Any],
    feedback: str,
    rack: dict[str, Any],
) -> dict[str, Any]:
    """Refine a patch from one feedback message, without a session.

    Args:
        patch: Patch document (camelCase JSON).
        feedback: What to change, e.g. "make it darker" or "add reverb".
        rack: Rack document listing the available modules.

    Returns:
        Refinement result with success, message, updatedPatch, modification,
        feedback, needsClarification, impossibleRequest and issues.
    """
    from patchrefine.refine import refine_patch as _refine

    return _refine(_load_patch(patch), feedback, _load_rack(rack)).to_dict()


@mcp.tool
def check_intents(message: str) -> dict[str, Any]:
    """Detect the special intents in a chat message.

    Args:
        message: User chat message.

    Returns:
        Dictionary with save_intent, start_fresh_intent, variations_intent,
        undo_intent flags and the save detection details.
    """
    from patchrefine.intents import check_special_intents, detect_save_intent

    save = detect_save_intent(message)
    result: dict[str, Any] = check_special_intents(message).to_dict()
    result["save"] = {
        "detected": save.detected,
        "confidence": save.confidence,
        "reasoning": save.reasoning,
    }
    return result


# =============================================================================
# Session Tools
# =============================================================================


@mcp.tool
def start_session(
    patch: dict[str, Any],
    rack: dict[str, Any],
) -> dict[str, Any]:
    """Start a refinement chat session.

    Args:
        patch: Patch document the conversation starts from.
        rack: Rack document listing the available modules.

    Returns:
        Dictionary with session_id and the starting patch.
    """
    session_id, session = get_session_store().create(_load_patch(patch), _load_rack(rack))
    logger.info(f"Started session {session_id} for '{session.current_patch.title}'")
    return {
        "session_id": session_id,
        "patch": session.current_patch.to_document(),
        "max_history": session.history.max_history,
    }


@mcp.tool
def send_message(session_id: str, message: str) -> dict[str, Any]:
    """Handle one chat turn in a session.

    The message is routed to undo, save, start fresh, variations or
    refinement, in that priority order.

    Args:
        session_id: Session from start_session.
        message: User chat message.

    Returns:
        Turn result with kind, message, patch, refinement and save.
    """
    session = get_session_store().get(session_id)
    result = session.handle_message(message).to_dict()
    result["session_id"] = session_id
    return result


@mcp.tool
def undo(session_id: str) -> dict[str, Any]:
    """Revert the last refinement in a session.

    Args:
        session_id: Session from start_session.

    Returns:
        Turn result of kind "undo" with the restored patch.
    """
    session = get_session_store().get(session_id)
    result = session.undo().to_dict()
    result["session_id"] = session_id
    return result


@mcp.tool
def get_session_history(session_id: str) -> dict[str, Any]:
    """Get the undo history and conversation of a session.

    Args:
        session_id: Session from start_session.

    Returns:
        Dictionary with snapshots (oldest first), current_index,
        modifications and conversation.
    """
    session = get_session_store().get(session_id)
    history = session.history
    return {
        "session_id": session_id,
        "current_index": history.current_index,
        "max_history": history.max_history,
        "snapshots": [
            {"id": p.id, "title": p.title, "updated_at": p.updated_at.isoformat()}
            for p in history.get_history()
        ],
        "modifications": [m.description for m in session.modifications],
        "conversation": session.conversation,
    }


# =============================================================================
# Status Tools
# =============================================================================


@mcp.tool
def status() -> dict[str, Any]:
    """Check server status.

    Returns:
        Dictionary with status, version, capabilities and session usage.
    """
    store = get_session_store()
    return {
        "status": "healthy",
        "version": get_server_version(),
        "capabilities": get_server_capabilities(),
        "sessions": {"active": len(store), "limit": store.limit},
        "history_size": get_history_size(),
    }


# =============================================================================
# Resources (Schema Reference)
# =============================================================================


@lru_cache(maxsize=1)
def _cached_patch_schema() -> str:
    """Cached patch schema."""
    from patchrefine.models import export_patch_schema

    return json.dumps(export_patch_schema(), indent=2)


@mcp.resource("schema://patch")
def get_patch_schema() -> str:
    """Get the Patch JSON schema.

    Returns the full schema for patch documents, with camelCase keys.
    """
    return _cached_patch_schema()


# =============================================================================
# Server Factory & Runner
# =============================================================================


def create_server() -> FastMCP:
    """Create and configure the MCP server instance.

    Returns:
        Configured FastMCP server instance.
    """
    return mcp


def run_server(
    transport: TransportType = TransportType.STDIO,
    host: str = "0.0.0.0",
    port: int = 18090,
) -> None:
    """Run the MCP server with specified transport.

    Args:
        transport: Transport type (stdio, http, sse).
        host: Bind address for HTTP/SSE.
        port: Port for HTTP/SSE.
    """
    logger.info(f"Starting patchrefine server v{get_server_version()}")
    logger.info(f"Transport: {transport.value}")

    if transport == TransportType.STDIO:
        logger.info("Running in STDIO mode")
        mcp.run()
    elif transport == TransportType.HTTP:
        logger.info(f"Running in HTTP mode at http://{host}:{port}/mcp")
        mcp.run(
            transport="http",
            host=host,
            port=port,
            path="/mcp",
        )
    elif transport == TransportType.SSE:
        logger.info(f"Running in SSE mode at http://{host}:{port}")
        mcp.run(
            transport="sse",
            host=host,
            port=port,
        )
    else:
        raise ValueError(f"Unknown transport: {transport}")


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for MCP server.

    Args:
        argv: Command line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    from patchrefine.config import EnvVar, get_environment

    parser = argparse.ArgumentParser(
        prog="patchrefine",
        description="MCP server for conversational patch refinement",
    )
    parser.add_argument(
        "--transport",
        "-t",
        type=str,
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=get_environment(EnvVar.MCP_HOST),
        help="Bind address for HTTP/SSE (default: MCP_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=get_environment(EnvVar.MCP_PORT),
        help="Port for HTTP/SSE (default: MCP_PORT or 18090)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        transport = TransportType(args.transport)
        run_server(
            transport=transport,
            host=args.host,
            port=args.port,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
