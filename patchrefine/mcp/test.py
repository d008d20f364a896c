"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Session store
- Tool registration
- Tool functionality (direct and over the MCP protocol)
"""

import json

import pytest

from .lib import (
    ServerConfig,
    SessionStore,
    TransportType,
    get_server_capabilities,
    get_server_version,
)
from .server import create_server, get_session_store, mcp

# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        config = ServerConfig()

        assert config.name == "patchrefine"
        assert config.transport == TransportType.STDIO
        assert config.host == "0.0.0.0"
        assert config.port == 18090
        assert config.path == "/mcp"

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MCP_PORT", "9100")
        config = ServerConfig.from_env(transport=TransportType.HTTP)

        assert config.transport == TransportType.HTTP
        assert config.port == 9100

    @pytest.mark.unit
    def test_transport_from_string(self):
        assert TransportType("stdio") == TransportType.STDIO
        assert TransportType("http") == TransportType.HTTP
        assert TransportType("sse") == TransportType.SSE

    @pytest.mark.unit
    def test_version_and_capabilities(self):
        assert len(get_server_version().split(".")) >= 2
        caps = get_server_capabilities()
        assert caps["tools"] is True
        assert caps["resources"] is True


# =============================================================================
# Session Store Tests
# =============================================================================


class TestSessionStore:
    """Tests for the bounded session store."""

    @pytest.mark.unit
    def test_create_and_get(self, sample_patch, sample_rack):
        store = SessionStore(limit=3)
        session_id, session = store.create(sample_patch, sample_rack)

        assert session_id in store
        assert store.get(session_id) is session
        assert len(store) == 1

    @pytest.mark.unit
    def test_unknown_session(self):
        with pytest.raises(ValueError, match="not found"):
            SessionStore(limit=3).get("missing")

    @pytest.mark.unit
    def test_evicts_least_recently_used(self, sample_patch, sample_rack):
        store = SessionStore(limit=2)
        first, _ = store.create(sample_patch, sample_rack)
        second, _ = store.create(sample_patch, sample_rack)
        store.get(first)
        third, _ = store.create(sample_patch, sample_rack)

        assert first in store
        assert third in store
        assert second not in store
        assert len(store) == 2

    @pytest.mark.unit
    def test_limit_from_env(self, monkeypatch):
        monkeypatch.setenv("MCP_SESSION_LIMIT", "7")
        assert SessionStore().limit == 7

    @pytest.mark.unit
    def test_remove(self, sample_patch, sample_rack):
        store = SessionStore(limit=3)
        session_id, _ = store.create(sample_patch, sample_rack)

        assert store.remove(session_id) is True
        assert store.remove(session_id) is False


# =============================================================================
# Server Instance Tests
# =============================================================================


class TestServerInstance:
    """Tests for FastMCP server instance."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self):
        assert create_server() is mcp

    @pytest.mark.unit
    def test_server_has_name(self):
        assert mcp.name == "patchrefine"

    @pytest.mark.unit
    def test_tools_registered(self):
        tool_names = set(mcp._tool_manager._tools.keys())

        assert tool_names == {
            "refine_patch",
            "check_intents",
            "start_session",
            "send_message",
            "undo",
            "get_session_history",
            "status",
        }


# =============================================================================
# Tool Functionality Tests (Unit level - no MCP protocol)
# =============================================================================


class TestRefinementTools:
    """Tests for the stateless tools."""

    @pytest.mark.unit
    def test_refine_patch(self, patch_document, rack_document):
        from .server import refine_patch

        result = refine_patch.fn(patch_document, "make it darker", rack_document)

        assert result["success"] is True
        assert result["feedback"]["target"] == "filter_cutoff"
        assert result["updatedPatch"]["id"] == "test-patch-1"

    @pytest.mark.unit
    def test_refine_patch_malformed_payload(self, rack_document):
        from .server import refine_patch

        with pytest.raises(ValueError, match="Invalid patch"):
            refine_patch.fn({"id": "x"}, "darker", rack_document)

    @pytest.mark.unit
    def test_check_intents(self):
        from .server import check_intents

        result = check_intents.fn("perfect, save it")

        assert result["save_intent"] is True
        assert result["undo_intent"] is False
        assert result["save"]["confidence"] == 0.95

    @pytest.mark.unit
    def test_status(self):
        from .server import status

        result = status.fn()

        assert result["status"] == "healthy"
        assert result["version"] == get_server_version()
        assert result["sessions"]["active"] == 0


class TestSessionTools:
    """Tests for the chat session tools."""

    @pytest.mark.unit
    def test_session_flow(self, patch_document, rack_document):
        from .server import get_session_history, send_message, start_session, undo

        session_id = start_session.fn(patch_document, rack_document)["session_id"]

        refined = send_message.fn(session_id, "make it darker")
        assert refined["kind"] == "refine"
        assert refined["session_id"] == session_id

        history = get_session_history.fn(session_id)
        assert history["current_index"] == 1
        assert len(history["snapshots"]) == 2
        assert history["conversation"] == ["make it darker"]

        reverted = undo.fn(session_id)
        assert reverted["kind"] == "undo"
        assert get_session_history.fn(session_id)["modifications"] == []

    @pytest.mark.unit
    def test_save_turn(self, patch_document, rack_document):
        from .server import send_message, start_session

        session_id = start_session.fn(patch_document, rack_document)["session_id"]
        saved = send_message.fn(session_id, "save this")

        assert saved["kind"] == "save"
        assert saved["patch"]["saved"] is True
        assert saved["save"]["should_save"] is True

    @pytest.mark.unit
    def test_unknown_session(self):
        from .server import send_message

        with pytest.raises(ValueError, match="not found"):
            send_message.fn("nope", "make it darker")

    @pytest.mark.unit
    def test_store_is_shared(self, patch_document, rack_document):
        from .server import start_session

        start_session.fn(patch_document, rack_document)
        assert len(get_session_store()) == 1


# =============================================================================
# MCP Protocol Integration Tests (require async)
# =============================================================================


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests using the in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_client_can_list_tools(self, mcp_client):
        tools = await mcp_client.list_tools()

        tool_names = [t.name for t in tools]
        assert "refine_patch" in tool_names
        assert "send_message" in tool_names

    @pytest.mark.asyncio
    async def test_client_can_refine(self, mcp_client, patch_document, rack_document):
        result = await mcp_client.call_tool(
            "refine_patch",
            {"patch": patch_document, "feedback": "add reverb", "rack": rack_document},
        )
        data = json.loads(result.content[0].text)

        assert data["success"] is True
        assert data["message"] == "✨ Added reverb (Clouds) after Veils"

    @pytest.mark.asyncio
    async def test_unknown_session_is_tool_error(self, mcp_client):
        with pytest.raises(Exception, match="not found"):
            await mcp_client.call_tool(
                "send_message", {"session_id": "missing", "message": "undo"}
            )

    @pytest.mark.asyncio
    async def test_patch_schema_resource(self, mcp_client):
        contents = await mcp_client.read_resource("schema://patch")
        schema = json.loads(contents[0].text)

        assert "patchingOrder" in schema["properties"]
