"""Parameterized tools: caller arguments shape the upstream query or the report."""

from __future__ import annotations

from typing import Any

from insights_mcp.schemas.common import ToolResult
from insights_mcp.schemas.inputs import BlocksInput, CostToMineInput, ProfitabilityInput
from insights_mcp.schemas.mining import Block, CostToMineData, ProfitabilityData
from insights_mcp.services import formatting as fmt
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools.base import FOOTER, ToolCategory, describe, run_tool


def _signed_money(value: float, decimals: int = 4) -> str:
    sign = "+" if value > 0 else "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _optional(value: float | int | None, template: str) -> str:
    return "N/A" if value is None else template.format(value)


def render_blocks(blocks: list[Block], params: BlocksInput) -> str:
    lines = ["# 🧱 Recent Bitcoin Blocks", ""]
    filters = [f"page {params.page}", f"page size {params.page_size}"]
    if params.start_date:
        filters.append(f"from {params.start_date}")
    if params.end_date:
        filters.append(f"to {params.end_date}")

    if not blocks:
        lines += [
            "⚠️ **No blocks found** for the specified criteria.",
            "",
            f"**Filters:** {', '.join(filters)}",
            "",
            "Try a different page or date range.",
        ]
        return "\n".join(lines)

    lines += [
        f"**Showing {len(blocks)} blocks** ({', '.join(filters)})",
        "",
        "| Height | Pool | Time | Transactions | Size (MB) | Value (BTC) |",
        "|--------|------|------|--------------|-----------|-------------|",
    ]
    for block in blocks:
        lines.append(
            f"| {block.height:,} | {block.pool or 'Unknown'} | "
            f"{fmt.format_relative_time(block.timestamp)} | "
            f"{_optional(block.transaction_count, '{:,}')} | "
            f"{_optional(block.size_mb, '{:.2f}')} | "
            f"{_optional(block.block_value_btc, '{:.8f}')} |"
        )

    tx_counts = [b.transaction_count for b in blocks if b.transaction_count is not None]
    values = [b.block_value_btc for b in blocks if b.block_value_btc is not None]
    sizes = [b.size_mb for b in blocks if b.size_mb is not None]
    lines += ["", "**Summary:**", f"- Total Blocks Displayed: {len(blocks)}"]
    if tx_counts:
        lines.append(f"- Average Transactions: {fmt.mean(tx_counts):,.0f}")
    if sizes:
        lines.append(f"- Average Size: {fmt.mean(sizes):.2f} MB")
    if values:
        lines.append(f"- Average Block Value: {fmt.mean(values):.8f} BTC")
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


class BlocksTool:
    name = "braiins_blocks"
    description = (
        "Get recent Bitcoin blocks with mining pool, time, transaction count and block value. "
        "Supports pagination and optional date filtering."
    )
    category = ToolCategory.PARAMETERIZED
    input_model = BlocksInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: BlocksInput) -> str:
        blocks = await self._client.get_blocks(
            page=params.page,
            page_size=params.page_size,
            start_date=params.start_date,
            end_date=params.end_date,
        )
        return render_blocks(blocks, params)


# ---------------------------------------------------------------------------
# Profitability calculator
# ---------------------------------------------------------------------------


def profitability_badge(profit: float) -> str:
    if profit > 0.05:
        return "(Highly Profitable)"
    if profit > 0.02:
        return "(Profitable)"
    if profit > 0:
        return "(Marginally Profitable)"
    if profit > -0.02:
        return "(Marginally Unprofitable)"
    return "(Unprofitable)"


def market_condition(profit: float) -> str:
    if profit > 0.05:
        return "Excellent - High profit margins"
    if profit > 0.02:
        return "Good - Healthy profit margins"
    if profit > 0:
        return "Fair - Slim profit margins"
    if profit > -0.02:
        return "Poor - Operating at a loss"
    return "Critical - Significant losses"


def price_comparison(price: float, breakeven: float) -> str:
    margin = fmt.percent_change(price, breakeven)
    if margin is None:
        return "(N/A)"
    if margin > 50:
        return "✅ (Well above break-even)"
    if margin > 20:
        return "✅ (Above break-even)"
    if margin > 0:
        return "⚠️ (Slightly above break-even)"
    if margin > -20:
        return "❌ (Below break-even)"
    return "❌ (Well below break-even)"


def _roi_section(data: ProfitabilityData, hardware_cost: float) -> list[str]:
    lines = [
        "## ROI Analysis",
        "",
        f"- **Hardware Cost:** {fmt.format_currency(hardware_cost)}",
    ]
    roi_days = data.roi_days
    if roi_days is None or roi_days <= 0:
        lines.append("- **Estimated ROI Period:** N/A (no payback at current conditions)")
        return lines
    lines += [
        f"- **Estimated ROI Period:** {roi_days:,.0f} days "
        f"({roi_days / 30:.1f} months / {roi_days / 365:.2f} years)",
        # recovered per day = (cost / roi_days) / cost
        f"- **Daily Cost Recovery:** {100 / roi_days:.2f}% of hardware cost per day",
    ]
    return lines


def render_profitability(data: ProfitabilityData, params: ProfitabilityInput) -> str:
    profit = data.net_daily_profit_per_th
    lines = [
        "# ⚡ Bitcoin Mining Profitability Analysis",
        "",
        "## Input Parameters",
        "",
        f"- **Electricity Cost:** ${params.electricity_cost_kwh:.4f}/kWh",
        f"- **Hardware Efficiency:** {params.hardware_efficiency_jth:.1f} J/TH",
        "",
        f"## Profitability Summary {'✅' if profit > 0 else '❌'}",
        "",
        f"- **Daily Revenue:** ${data.daily_revenue_per_th:.4f}/TH",
        f"- **Daily Electricity Cost:** ${data.daily_electricity_cost_per_th:.4f}/TH",
        f"- **Net Daily Profit:** {_signed_money(profit)}/TH {profitability_badge(profit)}",
        "",
        "## Revenue Breakdown",
        "",
        "| Period | Profit per TH/s | Profit per 100 TH/s |",
        "|--------|-----------------|---------------------|",
        f"| Daily | {_signed_money(profit)} | {_signed_money(profit * 100, 2)} |",
        f"| Monthly (30d) | {_signed_money(data.monthly_profit_per_th, 2)} | "
        f"{_signed_money(data.monthly_profit_per_th * 100, 2)} |",
        f"| Annual (365d) | {_signed_money(data.annual_profit_per_th, 2)} | "
        f"{_signed_money(data.annual_profit_per_th * 100, 2)} |",
        "",
    ]
    if params.hardware_cost_usd is not None:
        lines += [*_roi_section(data, params.hardware_cost_usd), ""]

    lines += [
        "## Break-Even Analysis",
        "",
        f"- **Break-even BTC Price:** {fmt.format_currency(data.breakeven_btc_price)}",
        f"- **Current BTC Price:** {fmt.format_currency(data.btc_price_usd)} "
        f"{price_comparison(data.btc_price_usd, data.breakeven_btc_price)}",
        f"- **Break-even Hashrate:** {data.breakeven_hashrate_ths:.2f} TH/s",
        f"- **Profitability Threshold:** ${data.profitability_threshold_kwh:.4f}/kWh",
        "",
        "## Market Context",
        "",
        f"- **Network Difficulty:** {fmt.format_difficulty(data.network_difficulty)}",
        f"- **Current Market Conditions:** {market_condition(profit)}",
        "",
        "---",
        "",
        FOOTER,
        f"*Calculations based on current network conditions as of {data.timestamp}*",
        f"*{_profitability_warning(profit)}*",
    ]
    return "\n".join(lines)


def _profitability_warning(profit: float) -> str:
    if profit <= 0:
        return (
            "⚠️ WARNING: Mining is currently unprofitable with these parameters. "
            "Consider reducing electricity costs or upgrading hardware."
        )
    if profit < 0.01:
        return (
            "⚠️ CAUTION: Profit margins are very thin. Small changes in BTC price "
            "or difficulty could result in losses."
        )
    return "Profitability estimates assume stable network conditions and BTC price."


class ProfitabilityCalculatorTool:
    name = "braiins_profitability_calculator"
    description = (
        "Calculate Bitcoin mining profitability for a given electricity cost and hardware "
        "efficiency. Optionally include hardware cost for ROI analysis."
    )
    category = ToolCategory.PARAMETERIZED
    input_model = ProfitabilityInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: ProfitabilityInput) -> str:
        data = await self._client.get_profitability(
            electricity_cost_kwh=params.electricity_cost_kwh,
            hardware_efficiency_jth=params.hardware_efficiency_jth,
            hardware_cost_usd=params.hardware_cost_usd,
        )
        return render_profitability(data, params)


# ---------------------------------------------------------------------------
# Cost to mine
# ---------------------------------------------------------------------------


def cost_indicator(cost: float) -> str:
    if cost < 20_000:
        return "✅ (Low cost)"
    if cost < 40_000:
        return "⚠️ (Moderate cost)"
    if cost < 60_000:
        return "🔶 (High cost)"
    return "🔴 (Very high cost)"


def margin_indicator(margin: float) -> str:
    if margin > 50:
        return "✅ (Highly profitable)"
    if margin > 20:
        return "✅ (Profitable)"
    if margin > 0:
        return "⚠️ (Marginally profitable)"
    if margin > -20:
        return "❌ (Unprofitable)"
    return "🔴 (Severely unprofitable)"


def _cost_interpretation(data: CostToMineData) -> str:
    text = f"Mining one Bitcoin currently costs approximately **{fmt.format_currency(data.cost_usd)}**."
    margin = data.margin_percent
    if margin is None:
        return text
    if margin > 0:
        return (
            f"{text} With current BTC prices, mining is **profitable** with a margin of "
            f"{margin:.2f}%. Conditions are favorable at this electricity cost."
        )
    if margin == 0:
        return (
            f"{text} Mining is currently at the **break-even** point. Small price changes "
            "could significantly impact profitability."
        )
    return (
        f"{text} Mining is currently **unprofitable** with a margin of {margin:.2f}%. "
        "Operations at this electricity cost may need to reduce expenses or wait for better conditions."
    )


def render_cost_to_mine(data: CostToMineData, params: CostToMineInput) -> str:
    lines = ["# ⚒️ Cost to Mine 1 BTC", ""]
    if params.electricity_cost_kwh is not None:
        lines += [
            "## Input Parameters",
            "",
            f"- **Electricity Cost:** ${params.electricity_cost_kwh:.4f}/kWh",
            "",
        ]
    lines += [
        "## Mining Cost Analysis",
        "",
        f"- **Cost to Mine 1 BTC:** {fmt.format_currency(data.cost_usd)} {cost_indicator(data.cost_usd)}",
    ]
    if data.electricity_cost_kwh is not None:
        lines.append(f"- **Electricity Cost Used:** ${data.electricity_cost_kwh:.4f}/kWh")

    if data.break_even_price_usd is not None:
        lines += [
            "",
            "## Break-Even Analysis",
            "",
            f"- **Break-Even BTC Price:** {fmt.format_currency(data.break_even_price_usd)}",
        ]
        if data.margin_percent is not None:
            lines.append(
                f"- **Current Profit Margin:** {fmt.format_signed_percent(data.margin_percent)} "
                f"{margin_indicator(data.margin_percent)}"
            )

    lines += [
        "",
        "## Interpretation",
        "",
        _cost_interpretation(data),
        "",
        "---",
        "",
        FOOTER,
        "*Calculations based on current network difficulty and average hardware efficiency*",
    ]
    return "\n".join(lines)


class CostToMineTool:
    name = "braiins_cost_to_mine"
    description = (
        "Estimate the cost to mine one Bitcoin, with break-even price and current margin. "
        "Optionally takes an electricity cost."
    )
    category = ToolCategory.PARAMETERIZED
    input_model = CostToMineInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: CostToMineInput) -> str:
        data = await self._client.get_cost_to_mine(electricity_cost_kwh=params.electricity_cost_kwh)
        return render_cost_to_mine(data, params)
