"""Pydantic schemas: upstream payloads, tool inputs and the response envelope."""

from insights_mcp.schemas.common import ErrorKind, ErrorRecord, TextBlock, ToolDescriptor, ToolResult
from insights_mcp.schemas.history import (
    DailyRevenue,
    HashrateDifficultyPoint,
    HashrateValuePoint,
    TransactionFeePoint,
)
from insights_mcp.schemas.mining import Block, CostToMineData, ProfitabilityData
from insights_mcp.schemas.network import (
    DifficultyStats,
    HalvingData,
    HashrateStats,
    PoolEntry,
    PriceStats,
    RssItem,
    TransactionStats,
)

__all__ = [
    "ErrorKind",
    "ErrorRecord",
    "TextBlock",
    "ToolDescriptor",
    "ToolResult",
    "DailyRevenue",
    "HashrateDifficultyPoint",
    "HashrateValuePoint",
    "TransactionFeePoint",
    "Block",
    "CostToMineData",
    "ProfitabilityData",
    "DifficultyStats",
    "HalvingData",
    "HashrateStats",
    "PoolEntry",
    "PriceStats",
    "RssItem",
    "TransactionStats",
]
