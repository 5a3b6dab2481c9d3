"""Shared tool contract and the execute() state machine every tool runs through."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, TypeVar, runtime_checkable

from insights_mcp.errors import handle_tool_error
from insights_mcp.schemas.common import ToolDescriptor, ToolResult
from insights_mcp.schemas.inputs import ToolInput, build_input_schema, validate_input

logger = logging.getLogger("mcp.tools")

InputT = TypeVar("InputT", bound=ToolInput)

FOOTER = "*Data from [Braiins Insights Dashboard](https://insights.braiins.com)*"


class ToolCategory(str, Enum):
    SIMPLE = "simple"
    PARAMETERIZED = "parameterized"
    HISTORICAL = "historical"
    COMPOSITE = "composite"


@runtime_checkable
class Tool(Protocol):
    """Capability set shared by every tool: identity plus ``execute``."""

    name: str
    description: str
    category: ToolCategory
    input_model: type[ToolInput]
    input_schema: dict[str, Any]
    descriptor: ToolDescriptor

    async def execute(self, raw: Any = None) -> ToolResult: ...


def describe(tool: Tool) -> ToolDescriptor:
    """Build the immutable descriptor for a tool from its class attributes."""
    return ToolDescriptor(
        name=tool.name,
        description=tool.description,
        input_schema=build_input_schema(tool.input_model),
    )


async def run_tool(
    tool: Tool,
    raw: Any,
    work: Callable[[InputT], Awaitable[str]],
) -> ToolResult:
    """Validate ``raw``, run ``work`` on the validated input and wrap the report.

    Any exception raised along the way is classified and rendered into an
    error envelope; this function never raises for an ordinary fault.
    """
    t0 = time.perf_counter()
    try:
        params = validate_input(tool.input_model, raw)
        text = await work(params)
    except Exception as exc:
        record, message = handle_tool_error(tool.name, exc)
        elapsed = round((time.perf_counter() - t0) * 1000, 2)
        logger.info("tool=%s status=error kind=%s ms=%s", tool.name, record.kind.value, elapsed)
        return ToolResult.failure(message)

    elapsed = round((time.perf_counter() - t0) * 1000, 2)
    logger.info("tool=%s status=ok ms=%s", tool.name, elapsed)
    return ToolResult.success(text)
