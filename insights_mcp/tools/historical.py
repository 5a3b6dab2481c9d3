"""Historical tools: fetch a time series (most recent first) and summarise it."""

from __future__ import annotations

from typing import Any

from insights_mcp.schemas.common import ToolResult
from insights_mcp.schemas.history import (
    DailyRevenue,
    HashrateDifficultyPoint,
    HashrateValuePoint,
    TransactionFeePoint,
)
from insights_mcp.schemas.inputs import HashrateDifficultyHistoryInput, HistoryInput
from insights_mcp.services import formatting as fmt
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools.base import FOOTER, ToolCategory, describe, run_tool

SATS_PER_BTC = 100_000_000


def no_data(title: str) -> str:
    return "\n".join(
        [
            title,
            "",
            "⚠️ **No Data Available**",
            "",
            "The API returned no historical data points. Try again later.",
        ]
    )


def _data_points(shown: int, total: int) -> str:
    suffix = f" (of {total} total)" if total > shown else ""
    return f"- **Data Points:** {shown}{suffix}"


def _daily_change(current: float, previous: float | None) -> str:
    if previous is None or previous <= 0:
        return "N/A"
    return fmt.format_optional_percent(fmt.percent_change(current, previous))


def _period_change(latest: float, oldest: float) -> str:
    if oldest <= 0:
        return "N/A"
    return fmt.format_optional_percent(fmt.percent_change(latest, oldest))


def _finish(lines: list[str], shown: int, cap: int) -> str:
    note = fmt.truncation_note(min(shown, cap), shown, "data points")
    if note:
        lines += ["", note]
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Daily revenue
# ---------------------------------------------------------------------------

REVENUE_TABLE_CAP = 10


def render_daily_revenue(data: list[DailyRevenue], total: int) -> str:
    title = "# 💵 Bitcoin Mining Daily Revenue History"
    if not data:
        return no_data(title)

    revenues = [d.revenue_usd for d in data]
    lines = [
        title,
        "",
        "## Summary Statistics",
        "",
        _data_points(len(data), total),
        f"- **Total Revenue:** {fmt.format_currency(sum(revenues))}",
        f"- **Average Daily Revenue:** {fmt.format_currency(fmt.mean(revenues))}",
        f"- **Highest Daily Revenue:** {fmt.format_currency(max(revenues))}",
        f"- **Lowest Daily Revenue:** {fmt.format_currency(min(revenues))}",
        f"- **Period Change:** {_period_change(revenues[0], revenues[-1])}",
        f"- **Date Range:** {data[-1].date} to {data[0].date}",
        "",
        "## Recent Daily Revenue",
        "",
        "| Date | Revenue (USD) | Block Rewards (BTC) | Fees (BTC) |",
        "|------|---------------|---------------------|------------|",
    ]
    for entry in data[:REVENUE_TABLE_CAP]:
        rewards = "N/A" if entry.block_rewards_btc is None else f"{entry.block_rewards_btc:.4f}"
        fees = "N/A" if entry.fees_btc is None else f"{entry.fees_btc:.4f}"
        lines.append(f"| {entry.date} | {fmt.format_currency(entry.revenue_usd)} | {rewards} | {fees} |")
    return _finish(lines, len(data), REVENUE_TABLE_CAP)


class DailyRevenueHistoryTool:
    name = "braiins_daily_revenue_history"
    description = (
        "Get historical daily Bitcoin mining revenue in USD, with block reward and fee "
        "breakdown where available."
    )
    category = ToolCategory.HISTORICAL
    input_model = HistoryInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: HistoryInput) -> str:
        data = await self._client.get_daily_revenue_history()
        return render_daily_revenue(data[: params.limit], len(data))


# ---------------------------------------------------------------------------
# Hashrate & difficulty
# ---------------------------------------------------------------------------

HASH_DIFF_TABLE_CAP = 15


def render_hashrate_and_difficulty(data: list[HashrateDifficultyPoint], total: int) -> str:
    title = "# 📈 Bitcoin Network Hashrate & Difficulty History"
    if not data:
        return no_data(title)

    hashrates = [d.hashrate_ehs for d in data]
    lines = [
        title,
        "",
        "## Hashrate Statistics",
        "",
        _data_points(len(data), total),
        f"- **Current Hashrate:** {hashrates[0]:.2f} EH/s",
        f"- **Average Hashrate:** {fmt.mean(hashrates):.2f} EH/s",
        f"- **Peak Hashrate:** {max(hashrates):.2f} EH/s",
        f"- **Lowest Hashrate:** {min(hashrates):.2f} EH/s",
        f"- **Period Change:** {_period_change(hashrates[0], hashrates[-1])}",
        "",
        "## Difficulty Statistics",
        "",
        f"- **Current Difficulty:** {fmt.format_difficulty(data[0].difficulty)}",
        f"- **Period Change:** {_period_change(data[0].difficulty, data[-1].difficulty)}",
        f"- **Time Range:** {fmt.format_timestamp(data[-1].timestamp)} to "
        f"{fmt.format_timestamp(data[0].timestamp)}",
        "",
        "## Recent Data Points",
        "",
        "| Timestamp | Hashrate (EH/s) | Difficulty |",
        "|-----------|-----------------|------------|",
    ]
    for entry in data[:HASH_DIFF_TABLE_CAP]:
        lines.append(
            f"| {fmt.format_timestamp(entry.timestamp)} | {entry.hashrate_ehs:.2f} | "
            f"{fmt.format_difficulty(entry.difficulty)} |"
        )
    return _finish(lines, len(data), HASH_DIFF_TABLE_CAP)


class HashrateAndDifficultyHistoryTool:
    name = "braiins_hashrate_and_difficulty_history"
    description = "Get historical Bitcoin network hashrate (EH/s) and difficulty data points."
    category = ToolCategory.HISTORICAL
    input_model = HashrateDifficultyHistoryInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: HashrateDifficultyHistoryInput) -> str:
        data = await self._client.get_hashrate_and_difficulty_history()
        return render_hashrate_and_difficulty(data[: params.limit], len(data))


# ---------------------------------------------------------------------------
# Hash value
# ---------------------------------------------------------------------------

HASH_VALUE_TABLE_CAP = 10


def format_hash_value(value: float) -> str:
    return fmt.format_small(value, decimals=6, threshold=0.001, sci_digits=3)


def render_hashrate_value(data: list[HashrateValuePoint], total: int) -> str:
    title = "# 💎 Bitcoin Hash Value History"
    if not data:
        return no_data(title)

    values = [d.hash_value_usd_per_th_day for d in data]
    lines = [
        title,
        "",
        "## Summary Statistics",
        "",
        _data_points(len(data), total),
        f"- **Current Hash Value:** ${format_hash_value(values[0])}/TH/day",
        f"- **Average Hash Value:** ${format_hash_value(fmt.mean(values))}/TH/day",
        f"- **Highest Hash Value:** ${format_hash_value(max(values))}/TH/day",
        f"- **Lowest Hash Value:** ${format_hash_value(min(values))}/TH/day",
        f"- **Period Change:** {_period_change(values[0], values[-1])}",
        f"- **Date Range:** {data[-1].date} to {data[0].date}",
        "",
        "## Recent Hash Value Data",
        "",
        "| Date | Hash Value (USD/TH/day) | Daily Change |",
        "|------|-------------------------|--------------|",
    ]
    shown = data[:HASH_VALUE_TABLE_CAP]
    for index, entry in enumerate(shown):
        # the following entry is the previous day
        previous = shown[index + 1].hash_value_usd_per_th_day if index + 1 < len(shown) else None
        lines.append(
            f"| {entry.date} | ${format_hash_value(entry.hash_value_usd_per_th_day)} | "
            f"{_daily_change(entry.hash_value_usd_per_th_day, previous)} |"
        )
    return _finish(lines, len(data), HASH_VALUE_TABLE_CAP)


class HashrateValueHistoryTool:
    name = "braiins_hashrate_value_history"
    description = (
        "Get historical hash value (USD earned per TH/s per day), useful for tracking "
        "mining revenue efficiency over time."
    )
    category = ToolCategory.HISTORICAL
    input_model = HistoryInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: HistoryInput) -> str:
        data = await self._client.get_hashrate_value_history()
        return render_hashrate_value(data[: params.limit], len(data))


# ---------------------------------------------------------------------------
# Transaction fees
# ---------------------------------------------------------------------------

FEES_TABLE_CAP = 10


def format_btc(value: float) -> str:
    return fmt.format_small(value, decimals=6, threshold=1e-4, sci_digits=3)


def fee_market(current: float, average: float) -> str:
    if current > average * 1.5:
        return (
            "⚡ **Fee market is elevated** - Transaction fees are significantly above average, "
            "pointing to high congestion or increased demand."
        )
    if current < average * 0.5:
        return (
            "💨 **Fee market is low** - Transaction fees are significantly below average; "
            "favorable conditions for sending transactions."
        )
    return "📊 **Fee market is normal** - Transaction fees are within typical range."


def render_transaction_fees(data: list[TransactionFeePoint], total: int) -> str:
    title = "# 📊 Bitcoin Transaction Fees History"
    if not data:
        return no_data(title)

    fees = [d.avg_fee_btc for d in data]
    average = fmt.mean(fees)
    lines = [
        title,
        "",
        "## Summary Statistics",
        "",
        _data_points(len(data), total),
        f"- **Current Avg Fee:** {format_btc(fees[0])} BTC",
        f"- **Average Fee:** {format_btc(average)} BTC",
        f"- **Highest Avg Fee:** {format_btc(max(fees))} BTC",
        f"- **Lowest Avg Fee:** {format_btc(min(fees))} BTC",
        f"- **Period Change:** {_period_change(fees[0], fees[-1])}",
        f"- **Date Range:** {data[-1].date} to {data[0].date}",
        "",
        "## Fee Market Context",
        "",
        fee_market(fees[0], average),
        "",
        "## Recent Transaction Fee Data",
        "",
        "| Date | Avg Fee (BTC) | Avg Fee (sats) | Avg Fee (USD) | Daily Change |",
        "|------|---------------|----------------|---------------|--------------|",
    ]
    shown = data[:FEES_TABLE_CAP]
    for index, entry in enumerate(shown):
        previous = shown[index + 1].avg_fee_btc if index + 1 < len(shown) else None
        usd = "N/A" if entry.avg_fee_usd is None else fmt.format_currency(entry.avg_fee_usd)
        lines.append(
            f"| {entry.date} | {format_btc(entry.avg_fee_btc)} | "
            f"{round(entry.avg_fee_btc * SATS_PER_BTC):,} | {usd} | "
            f"{_daily_change(entry.avg_fee_btc, previous)} |"
        )
    return _finish(lines, len(data), FEES_TABLE_CAP)


class TransactionFeesHistoryTool:
    name = "braiins_transaction_fees_history"
    description = "Get historical average Bitcoin transaction fees per day in BTC, sats and USD."
    category = ToolCategory.HISTORICAL
    input_model = HistoryInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: HistoryInput) -> str:
        data = await self._client.get_transaction_fees_history()
        return render_transaction_fees(data[: params.limit], len(data))
