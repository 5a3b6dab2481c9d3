"""MCP server bootstrap – registers tools, resources, prompts and runs transports."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)

from insights_mcp.config import settings
from insights_mcp.schemas.common import ERROR_MARKER, ToolResult
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools import ToolCategory, create_tools, get_tools_by_category
from insights_mcp.tools.base import Tool as InsightsTool

logger = logging.getLogger("mcp.server")

CATALOGUE_URI = "insights://tools"


class ToolCallFailed(Exception):
    """Raised inside the MCP handler so the SDK marks the result ``isError``."""


# ---------------------------------------------------------------------------
# Transport-independent helpers (shared with the SSE transport)
# ---------------------------------------------------------------------------


def tool_definitions(tools: list[InsightsTool]) -> list[Tool]:
    return [
        Tool(
            name=t.descriptor.name,
            description=t.descriptor.description,
            inputSchema=t.descriptor.schema_copy(),
        )
        for t in tools
    ]


async def dispatch(tools: dict[str, InsightsTool], name: str, arguments: Any) -> ToolResult:
    """Run a tool by name. Unknown names produce an error envelope, never a raise."""
    tool = tools.get(name)
    if tool is None:
        logger.warning("call for unknown tool %s", name)
        return ToolResult.failure(
            f"{ERROR_MARKER} **Unknown tool**: {name}\n\nAvailable tools: {', '.join(sorted(tools))}"
        )
    return await tool.execute(arguments)


def tool_catalogue(tools: list[InsightsTool]) -> str:
    """JSON listing of tool names grouped by category."""
    return json.dumps(
        {
            category.value: [
                {"name": t.name, "description": t.description}
                for t in get_tools_by_category(tools, category)
            ]
            for category in ToolCategory
        },
        indent=2,
    )


PROMPTS: list[Prompt] = [
    Prompt(
        name="network_snapshot",
        description="Summarise current Bitcoin network conditions",
        arguments=[],
    ),
    Prompt(
        name="mining_profitability_check",
        description="Evaluate whether a mining setup is profitable right now",
        arguments=[
            PromptArgument(
                name="electricity_cost_kwh",
                description="Electricity cost in USD per kWh (e.g. 0.05)",
                required=True,
            ),
            PromptArgument(
                name="hardware_efficiency_jth",
                description="Miner efficiency in J/TH (e.g. 25)",
                required=True,
            ),
        ],
    ),
]


def render_prompt(name: str, arguments: dict | None = None) -> list[PromptMessage]:
    """Return a filled prompt template."""
    args = arguments or {}

    if name == "network_snapshot":
        text = (
            "Give me a snapshot of the Bitcoin network:\n\n"
            "1. Call braiins_mining_overview for hashrate, difficulty, price and recent blocks\n"
            "2. Call braiins_network_health_monitor for the health score and alerts\n"
            "3. Call braiins_transaction_stats for mempool congestion\n"
            "4. Summarise the state of the network in a few bullet points"
        )
    elif name == "mining_profitability_check":
        electricity = args.get("electricity_cost_kwh", "0.05")
        efficiency = args.get("hardware_efficiency_jth", "25")
        text = (
            f"Assess mining profitability at ${electricity}/kWh with {efficiency} J/TH hardware:\n\n"
            "1. Call braiins_profitability_deep_dive with these parameters and include_historical=true\n"
            "2. Call braiins_difficulty_stats to check the next adjustment\n"
            "3. Call braiins_halvings to factor in the next reward cut\n"
            "4. Conclude whether to mine, pause or upgrade hardware"
        )
    else:
        raise ValueError(f"Unknown prompt: {name}")

    return [PromptMessage(role="user", content=TextContent(type="text", text=text))]


# ---------------------------------------------------------------------------
# Server factory
# ---------------------------------------------------------------------------


def create_mcp_server(tools: list[InsightsTool]) -> Server:
    """Create and configure the MCP server instance around a prebuilt tool list."""
    server = Server(settings.mcp_server_name, version=settings.mcp_server_version)
    by_name = {t.name: t for t in tools}
    definitions = tool_definitions(tools)

    # ── Tools ─────────────────────────────────────────────────────────────

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return definitions

    # tools validate their own input and report every violation at once
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        result = await dispatch(by_name, name, arguments)
        if result.is_error:
            raise ToolCallFailed(result.text)
        return [TextContent(type="text", text=result.text)]

    # ── Resources ─────────────────────────────────────────────────────────

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        return [
            Resource(
                uri=CATALOGUE_URI,
                name="Tool Catalogue",
                description="All Braiins Insights tools grouped by category",
                mimeType="application/json",
            ),
        ]

    @server.read_resource()
    async def read_resource(uri: str) -> str:
        if str(uri) == CATALOGUE_URI:
            return tool_catalogue(tools)
        raise ValueError(f"Unknown resource: {uri}")

    # ── Prompts ───────────────────────────────────────────────────────────

    @server.list_prompts()
    async def list_prompts() -> list[Prompt]:
        return PROMPTS

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict | None = None) -> GetPromptResult:
        return GetPromptResult(messages=render_prompt(name, arguments))

    return server


# ---------------------------------------------------------------------------
# Entry-point: run MCP server over stdio
# ---------------------------------------------------------------------------


async def run_mcp_server() -> None:
    """Start the MCP server using stdio transport."""
    async with InsightsClient() as client:
        tools = create_tools(client)
        server = create_mcp_server(tools)
        logger.info(
            "Starting MCP server '%s' v%s (stdio) with %d tools",
            settings.mcp_server_name,
            settings.mcp_server_version,
            len(tools),
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """CLI entry-point."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    asyncio.run(run_mcp_server())


if __name__ == "__main__":
    main()
