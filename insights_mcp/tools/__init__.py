"""Tool catalogue.

Tools are built by :func:`create_tools` from an injected client; there is no
module-level registry.  Hosts keep the returned list for the process lifetime.
"""

from __future__ import annotations

from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools.base import Tool, ToolCategory
from insights_mcp.tools.composite import (
    MiningOverviewTool,
    NetworkHealthMonitorTool,
    ProfitabilityDeepDiveTool,
)
from insights_mcp.tools.historical import (
    DailyRevenueHistoryTool,
    HashrateAndDifficultyHistoryTool,
    HashrateValueHistoryTool,
    TransactionFeesHistoryTool,
)
from insights_mcp.tools.parameterized import BlocksTool, CostToMineTool, ProfitabilityCalculatorTool
from insights_mcp.tools.simple import (
    DifficultyStatsTool,
    HalvingsTool,
    HashrateStatsTool,
    PoolStatsTool,
    PriceStatsTool,
    RssFeedTool,
    TransactionStatsTool,
)

TOOL_CLASSES: tuple[type, ...] = (
    # simple
    HashrateStatsTool,
    DifficultyStatsTool,
    PriceStatsTool,
    PoolStatsTool,
    RssFeedTool,
    HalvingsTool,
    TransactionStatsTool,
    # parameterized
    BlocksTool,
    ProfitabilityCalculatorTool,
    CostToMineTool,
    # historical
    DailyRevenueHistoryTool,
    HashrateAndDifficultyHistoryTool,
    HashrateValueHistoryTool,
    TransactionFeesHistoryTool,
    # composite
    MiningOverviewTool,
    ProfitabilityDeepDiveTool,
    NetworkHealthMonitorTool,
)


def create_tools(client: InsightsClient) -> list[Tool]:
    """Instantiate every tool against ``client``, in a stable order."""
    tools: list[Tool] = [cls(client) for cls in TOOL_CLASSES]
    names = [t.name for t in tools]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate tool names: {names}")
    return tools


def get_tools_by_category(tools: list[Tool], category: ToolCategory) -> list[Tool]:
    return [t for t in tools if t.category is category]


__all__ = ["Tool", "ToolCategory", "TOOL_CLASSES", "create_tools", "get_tools_by_category"]
