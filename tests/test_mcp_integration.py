"""Integration tests for MCP server protocol – tools, resources, and prompts."""

from __future__ import annotations

import importlib.metadata
import json

import pytest
from mcp import types

from insights_mcp.mcp.server import (
    PROMPTS,
    create_mcp_server,
    dispatch,
    render_prompt,
    tool_catalogue,
    tool_definitions,
)
from insights_mcp.tools import ToolCategory, create_tools, get_tools_by_category
from insights_mcp.tools.base import Tool


def test_catalogue_has_seventeen_tools(tools):
    assert len(tools) == 17
    assert all(isinstance(t, Tool) for t in tools)


def test_tool_names_are_unique_and_prefixed(tools):
    names = [t.name for t in tools]
    assert len(set(names)) == len(names)
    assert all(name.startswith("braiins_") for name in names)


def test_category_split(tools):
    counts = {c: len(get_tools_by_category(tools, c)) for c in ToolCategory}
    assert counts == {
        ToolCategory.SIMPLE: 7,
        ToolCategory.PARAMETERIZED: 3,
        ToolCategory.HISTORICAL: 4,
        ToolCategory.COMPOSITE: 3,
    }


def test_tool_schemas_have_required_fields(tools):
    """Every tool definition should have name, description, and an object inputSchema."""
    for tool in tool_definitions(tools):
        assert tool.name
        assert tool.description, f"Tool {tool.name} must have a description"
        assert tool.inputSchema["type"] == "object"
        assert "properties" in tool.inputSchema
        assert set(tool.inputSchema["required"]) <= set(tool.inputSchema["properties"])


def test_descriptors_are_stable(client):
    first = {t.name: t.descriptor for t in create_tools(client)}
    second = {t.name: t.descriptor for t in create_tools(client)}
    assert first == second


def test_schema_mutation_does_not_leak(tools):
    tool = tools[0]
    pristine = tool.descriptor.schema_copy()

    tool.input_schema["properties"]["injected"] = {"type": "string"}
    definition = tool_definitions(tools)[0]
    assert "injected" not in definition.inputSchema["properties"]
    definition.inputSchema["required"].append("injected")

    assert tool.descriptor.input_schema == pristine
    assert tool_definitions(tools)[0].inputSchema == pristine


def test_installed_mcp_is_major_version_one():
    assert importlib.metadata.version("mcp").split(".")[0] == "1"


def test_required_parameters_advertised(tool_by_name):
    schema = tool_by_name["braiins_profitability_deep_dive"].descriptor.input_schema
    assert schema["required"] == ["electricity_cost_kwh", "hardware_efficiency_jth"]
    assert tool_by_name["braiins_hashrate_stats"].descriptor.input_schema["properties"] == {}


@pytest.mark.asyncio
async def test_dispatch_runs_tool(tools):
    by_name = {t.name: t for t in tools}
    result = await dispatch(by_name, "braiins_price_stats", {})
    assert result.is_error is False
    assert result.to_wire()["isError"] is False
    assert result.to_wire()["content"][0]["type"] == "text"


@pytest.mark.asyncio
async def test_dispatch_unknown_tool(tools):
    by_name = {t.name: t for t in tools}
    result = await dispatch(by_name, "braiins_moon_price", {})
    assert result.is_error is True
    assert result.text.startswith("❌ **Unknown tool**: braiins_moon_price")
    assert "braiins_price_stats" in result.text


def test_server_registers_handlers(tools):
    server = create_mcp_server(tools)
    for request_type in (
        types.ListToolsRequest,
        types.CallToolRequest,
        types.ListResourcesRequest,
        types.ReadResourceRequest,
        types.ListPromptsRequest,
        types.GetPromptRequest,
    ):
        assert request_type in server.request_handlers


def test_tool_catalogue_resource(tools):
    catalogue = json.loads(tool_catalogue(tools))
    assert set(catalogue) == {"simple", "parameterized", "historical", "composite"}
    names = [entry["name"] for entry in catalogue["composite"]]
    assert names == [
        "braiins_mining_overview",
        "braiins_profitability_deep_dive",
        "braiins_network_health_monitor",
    ]


def test_prompts():
    assert {p.name for p in PROMPTS} == {"network_snapshot", "mining_profitability_check"}
    messages = render_prompt(
        "mining_profitability_check",
        {"electricity_cost_kwh": "0.07", "hardware_efficiency_jth": "21"},
    )
    assert "$0.07/kWh" in messages[0].content.text
    assert "21 J/TH" in messages[0].content.text
    with pytest.raises(ValueError):
        render_prompt("nope")
