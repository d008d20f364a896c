"""Pytest fixtures for MCP server tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncGenerator

import pytest

if TYPE_CHECKING:
    from fastmcp import Client, FastMCP


@pytest.fixture(autouse=True)
def clean_sessions():
    """Empty the process-wide session store around each test."""
    from .server import get_session_store

    get_session_store().clear()
    yield
    get_session_store().clear()


@pytest.fixture
def mcp_server() -> FastMCP:
    """Create MCP server instance for testing."""
    from .server import create_server

    return create_server()


@pytest.fixture
async def mcp_client(mcp_server: FastMCP) -> AsyncGenerator[Client, None]:
    """Create connected in-memory MCP client for testing.

    Args:
        mcp_server: The MCP server instance.

    Yields:
        Connected Client instance.
    """
    from fastmcp import Client

    async with Client(mcp_server) as client:
        yield client


@pytest.fixture
def patch_document(sample_patch) -> dict:
    return sample_patch.to_document()


@pytest.fixture
def rack_document(sample_rack) -> dict:
    return sample_rack.to_document()
