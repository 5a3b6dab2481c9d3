"""Tests for the SSE transport's HTTP endpoints and JSON-RPC routing."""

from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from insights_mcp.mcp import sse_server
from insights_mcp.mcp.sse_server import app, handle_rpc


@pytest.fixture
def session(tools):
    """Register a fake SSE session and tools without running the app lifespan."""
    app.state.tools = tools
    queue: asyncio.Queue = asyncio.Queue()
    sse_server._sessions["test-session"] = queue
    yield queue
    sse_server._sessions.pop("test-session", None)


@pytest.mark.asyncio
async def test_health():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["transport"] == "sse"


@pytest.mark.asyncio
async def test_messages_unknown_session():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/messages", params={"session_id": "missing"}, json={"jsonrpc": "2.0", "id": 1}
        )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_tools_list_over_messages(session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/messages",
            params={"session_id": "test-session"},
            json={"jsonrpc": "2.0", "id": 7, "method": "tools/list"},
        )
    assert response.status_code == 202
    message = session.get_nowait()
    assert message["id"] == 7
    assert len(message["result"]["tools"]) == 17


@pytest.mark.asyncio
async def test_tools_call_over_messages(session, client):
    client.get_difficulty_stats.side_effect = RuntimeError("boom")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        await http.post(
            "/messages",
            params={"session_id": "test-session"},
            json={
                "jsonrpc": "2.0",
                "id": 8,
                "method": "tools/call",
                "params": {"name": "braiins_difficulty_stats", "arguments": {}},
            },
        )
    result = session.get_nowait()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"].startswith("❌ **Unexpected Error**: boom")


@pytest.mark.asyncio
async def test_unknown_method_returns_rpc_error(session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.post(
            "/messages",
            params={"session_id": "test-session"},
            json={"jsonrpc": "2.0", "id": 9, "method": "tools/delete"},
        )
    message = session.get_nowait()
    assert message["error"]["code"] == -32601


@pytest.mark.asyncio
async def test_handle_rpc_initialize_and_resources(tools):
    init = await handle_rpc(tools, "initialize", {})
    assert init["serverInfo"]["name"] == "braiins-insights-mcp-server"

    listed = await handle_rpc(tools, "resources/list", {})
    uri = listed["resources"][0]["uri"]
    read = await handle_rpc(tools, "resources/read", {"uri": uri})
    assert "braiins_blocks" in read["contents"][0]["text"]

    with pytest.raises(LookupError):
        await handle_rpc(tools, "resources/read", {"uri": "insights://nope"})


@pytest.mark.asyncio
async def test_handle_rpc_prompts(tools):
    prompts = await handle_rpc(tools, "prompts/list", {})
    assert len(prompts["prompts"]) == 2
    got = await handle_rpc(tools, "prompts/get", {"name": "network_snapshot"})
    assert got["messages"][0]["role"] == "user"
    with pytest.raises(LookupError):
        await handle_rpc(tools, "prompts/get", {"name": "missing"})


def test_asgi_entry_point_reexports_app():
    from insights_mcp import main

    assert main.app is app
