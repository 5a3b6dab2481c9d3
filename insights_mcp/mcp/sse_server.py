"""SSE (Server-Sent Events) transport for the Braiins Insights MCP server.

This module exposes the same tools over HTTP using SSE, which is useful
for web-based MCP clients, testing, and scenarios where stdio transport
is not available.

Run with:
    python -m insights_mcp.mcp.sse_server

The server starts on http://0.0.0.0:8000 by default.
SSE endpoint: GET  /sse
Message post: POST /messages
Health check: GET  /health
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from insights_mcp.config import settings
from insights_mcp.mcp.server import (
    CATALOGUE_URI,
    PROMPTS,
    dispatch,
    render_prompt,
    tool_catalogue,
    tool_definitions,
)
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools import create_tools

logger = logging.getLogger("mcp.sse")

# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

# In-memory message queues keyed by session_id
_sessions: dict[str, asyncio.Queue] = {}
_session_counter = 0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown: one shared client and tool list per process."""
    logger.info(
        "MCP SSE transport starting on %s:%s",
        settings.fastapi_host,
        settings.fastapi_port,
    )
    async with InsightsClient() as client:
        app.state.tools = create_tools(client)
        yield
    logger.info("MCP SSE transport shutting down")
    _sessions.clear()


app = FastAPI(
    title="Braiins Insights MCP Server – SSE Transport",
    version=settings.mcp_server_version,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "transport": "sse",
        "version": settings.mcp_server_version,
    }


# ---------------------------------------------------------------------------
# SSE endpoint
# ---------------------------------------------------------------------------


@app.get("/sse")
async def sse_endpoint(request: Request):
    """Server-Sent Events stream for MCP protocol messages.

    The client opens this endpoint to receive messages from the MCP
    server.  The client posts requests to ``/messages?session_id=<id>``
    and reads the server responses from this stream.
    """
    global _session_counter
    _session_counter += 1
    session_id = f"session-{_session_counter}"

    queue: asyncio.Queue = asyncio.Queue()
    _sessions[session_id] = queue

    async def event_generator():
        # First event: tell the client where to POST requests
        yield {
            "event": "endpoint",
            "data": f"/messages?session_id={session_id}",
        }

        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=30.0)
                    yield {
                        "event": "message",
                        "data": json.dumps(message, default=str),
                    }
                except asyncio.TimeoutError:
                    yield {"comment": "keepalive"}
        finally:
            _sessions.pop(session_id, None)

    return EventSourceResponse(event_generator())


# ---------------------------------------------------------------------------
# JSON-RPC routing
# ---------------------------------------------------------------------------


async def handle_rpc(tools: list, method: str, params: dict[str, Any]) -> dict[str, Any]:
    """Return the JSON-RPC ``result`` for ``method``; raises LookupError if unknown."""
    if method == "initialize":
        return {
            "protocolVersion": "2024-11-05",
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"listChanged": False},
                "prompts": {"listChanged": False},
            },
            "serverInfo": {
                "name": settings.mcp_server_name,
                "version": settings.mcp_server_version,
            },
        }

    if method == "tools/list":
        return {"tools": [t.model_dump(exclude_none=True) for t in tool_definitions(tools)]}

    if method == "tools/call":
        by_name = {t.name: t for t in tools}
        result = await dispatch(by_name, params.get("name", ""), params.get("arguments"))
        return result.to_wire()

    if method == "resources/list":
        return {
            "resources": [
                {
                    "uri": CATALOGUE_URI,
                    "name": "Tool Catalogue",
                    "description": "All Braiins Insights tools grouped by category",
                    "mimeType": "application/json",
                }
            ]
        }

    if method == "resources/read":
        uri = params.get("uri", "")
        if uri != CATALOGUE_URI:
            raise LookupError(f"Unknown resource: {uri}")
        return {
            "contents": [{"uri": uri, "text": tool_catalogue(tools), "mimeType": "application/json"}]
        }

    if method == "prompts/list":
        return {"prompts": [p.model_dump(exclude_none=True) for p in PROMPTS]}

    if method == "prompts/get":
        try:
            messages = render_prompt(params.get("name", ""), params.get("arguments"))
        except ValueError as exc:
            raise LookupError(str(exc)) from exc
        return {"messages": [m.model_dump() for m in messages]}

    raise LookupError(f"Method '{method}' not found")


@app.post("/messages")
async def messages_endpoint(request: Request, session_id: str):
    """Receive a JSON-RPC request from the client, process it, and
    push the response onto the SSE stream for the matching session.
    """
    queue = _sessions.get(session_id)
    if queue is None:
        return JSONResponse(
            status_code=404,
            content={"error": f"Session '{session_id}' not found. Connect to /sse first."},
        )

    body = await request.json()
    logger.debug("SSE recv session=%s body=%s", session_id, body)

    rpc_id = body.get("id")
    try:
        result = await handle_rpc(
            request.app.state.tools, body.get("method", ""), body.get("params") or {}
        )
        response: dict[str, Any] = {"jsonrpc": "2.0", "id": rpc_id, "result": result}
    except LookupError as exc:
        response = {
            "jsonrpc": "2.0",
            "id": rpc_id,
            "error": {"code": -32601, "message": str(exc)},
        }

    await queue.put(response)

    return Response(status_code=202, content="Accepted")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "insights_mcp.mcp.sse_server:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
