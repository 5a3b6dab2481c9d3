"""Composite tools: fan out to several endpoints and merge them into one report.

Sources are fetched with :func:`gather_settled`, so one failing endpoint never
takes the whole report down.  Every source has exactly one "home" section;
when it is missing, that section shows an ``unavailable`` placeholder and the
availability notice at the bottom lists the failure.  Other sections that
merely reference the source omit those lines quietly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from insights_mcp.schemas.common import ToolResult
from insights_mcp.schemas.history import HashrateDifficultyPoint, HashrateValuePoint
from insights_mcp.schemas.inputs import (
    MiningOverviewInput,
    NetworkHealthInput,
    ProfitabilityDeepDiveInput,
)
from insights_mcp.schemas.mining import Block, CostToMineData, ProfitabilityData
from insights_mcp.schemas.network import DifficultyStats, HashrateStats, PriceStats, TransactionStats
from insights_mcp.services import formatting as fmt
from insights_mcp.services.aggregator import EndpointResult, gather_settled
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools.base import FOOTER, ToolCategory, describe, run_tool
from insights_mcp.tools.parameterized import market_condition, price_comparison, profitability_badge


def _values(results: list[EndpointResult]) -> dict[str, Any]:
    """Label -> value for fulfilled sources, None for rejected ones."""
    return {r.label: r.value if r.ok else None for r in results}


def _finish(lines: list[str], results: list[EndpointResult]) -> str:
    notice = fmt.availability_notice(results)
    if notice:
        lines += ["", *notice]
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Mining overview
# ---------------------------------------------------------------------------

HASHRATE = "Hashrate"
DIFFICULTY = "Difficulty"
PRICE = "Price"
BLOCKS = "Blocks"


def _network_section(stats: HashrateStats | None) -> list[str]:
    lines = ["## 📊 Network Overview", ""]
    if stats is None:
        return lines + [fmt.unavailable(HASHRATE)]
    return lines + [
        f"- **Current Hashrate:** {stats.current_hashrate:.2f} EH/s",
        f"- **30-Day Average:** {stats.hash_rate_30:.2f} EH/s",
        f"- **Hash Price:** ${stats.hash_price:.3f} per TH/day",
        f"- **Daily Network Revenue:** {fmt.format_currency(stats.rev_usd)}",
    ]


def _difficulty_section(stats: DifficultyStats | None) -> list[str]:
    lines = ["## ⛏️ Difficulty Status", ""]
    if stats is None:
        return lines + [fmt.unavailable(DIFFICULTY)]
    change = stats.estimated_change_percent
    lines += [
        f"- **Current Difficulty:** {fmt.format_difficulty(stats.difficulty)}",
        f"- **Estimated Next Difficulty:** {fmt.format_difficulty(stats.estimated_next_diff)}",
        f"- **Estimated Change:** {fmt.trend_indicator(change)} {fmt.format_signed_percent(change)}",
    ]
    if stats.blocks_until_adjustment is not None:
        lines.append(f"- **Blocks Until Adjustment:** {stats.blocks_until_adjustment:,}")
    return lines


def _price_section(stats: PriceStats | None) -> list[str]:
    lines = ["## 💰 Price Snapshot", ""]
    if stats is None:
        return lines + [fmt.unavailable(PRICE)]
    change = stats.percent_change_24h
    return lines + [
        f"- **BTC Price:** {fmt.format_currency(stats.price)}",
        f"- **24h Change:** {fmt.trend_indicator(change)} {fmt.format_signed_percent(change)}",
    ]


def _blocks_section(blocks: list[Block] | None, requested: int) -> list[str]:
    lines = ["## 🧱 Recent Blocks", ""]
    if blocks is None:
        return lines + [fmt.unavailable(BLOCKS)]
    if not blocks:
        return lines + ["No recent blocks reported."]
    lines += [
        "| Height | Pool | Time | Transactions |",
        "|--------|------|------|--------------|",
    ]
    for block in blocks[:requested]:
        tx = "N/A" if block.transaction_count is None else f"{block.transaction_count:,}"
        lines.append(
            f"| {block.height:,} | {block.pool or 'Unknown'} | "
            f"{fmt.format_relative_time(block.timestamp)} | {tx} |"
        )
    return lines


def render_mining_overview(results: list[EndpointResult], params: MiningOverviewInput) -> str:
    data = _values(results)
    lines = [
        "# 🔍 Bitcoin Mining Overview",
        "",
        *_network_section(data[HASHRATE]),
        "",
        *_difficulty_section(data[DIFFICULTY]),
        "",
        *_price_section(data[PRICE]),
    ]
    if params.include_recent_blocks:
        lines += ["", *_blocks_section(data[BLOCKS], params.block_count)]
    return _finish(lines, results)


class MiningOverviewTool:
    name = "braiins_mining_overview"
    description = (
        "Get a one-call overview of the Bitcoin mining ecosystem: network hashrate, "
        "difficulty, price and recent blocks. Sections degrade gracefully when a source fails."
    )
    category = ToolCategory.COMPOSITE
    input_model = MiningOverviewInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: MiningOverviewInput) -> str:
        sources = [
            (HASHRATE, self._client.get_hashrate_stats()),
            (DIFFICULTY, self._client.get_difficulty_stats()),
            (PRICE, self._client.get_price_stats()),
        ]
        if params.include_recent_blocks:
            sources.append((BLOCKS, self._client.get_blocks(page=1, page_size=params.block_count)))
        results = await gather_settled(sources)
        return render_mining_overview(results, params)


# ---------------------------------------------------------------------------
# Profitability deep dive
# ---------------------------------------------------------------------------

PROFITABILITY = "Profitability"
COST_TO_MINE = "Cost to mine"
HASH_VALUE_HISTORY = "Hash value history"


def _executive_summary(data: ProfitabilityData | None) -> list[str]:
    lines = ["## 📋 Executive Summary", ""]
    if data is None:
        return lines + [fmt.unavailable(PROFITABILITY)]
    profit = data.net_daily_profit_per_th
    status = "✅ Profitable" if profit > 0 else "❌ Unprofitable"
    return lines + [
        f"- **Status:** {status} {profitability_badge(profit)}",
        f"- **Net Daily Profit:** ${profit:.4f}/TH",
        f"- **Daily Revenue / Electricity:** ${data.daily_revenue_per_th:.4f} / "
        f"${data.daily_electricity_cost_per_th:.4f} per TH",
        f"- **Monthly Profit (100 TH/s):** {fmt.format_currency(data.monthly_profit_per_th * 100)}",
        f"- **Annual Profit (100 TH/s):** {fmt.format_currency(data.annual_profit_per_th * 100)}",
        f"- **Market Conditions:** {market_condition(profit)}",
    ]


def _break_even_section(
    profitability: ProfitabilityData | None,
    cost: CostToMineData | None,
    params: ProfitabilityDeepDiveInput,
) -> list[str]:
    lines = ["## ⚖️ Break-Even Analysis", ""]
    if profitability is not None:
        headroom = profitability.profitability_threshold_kwh - params.electricity_cost_kwh
        lines += [
            f"- **Break-even BTC Price:** {fmt.format_currency(profitability.breakeven_btc_price)} "
            f"{price_comparison(profitability.btc_price_usd, profitability.breakeven_btc_price)}",
            f"- **Electricity Threshold:** ${profitability.profitability_threshold_kwh:.4f}/kWh "
            f"(headroom ${headroom:+.4f}/kWh)",
            f"- **Break-even Hashrate:** {profitability.breakeven_hashrate_ths:.2f} TH/s",
        ]
    lines += ["", "### Cost to Mine 1 BTC", ""]
    if cost is None:
        return lines + [fmt.unavailable(COST_TO_MINE)]
    lines.append(f"- **Production Cost:** {fmt.format_currency(cost.cost_usd)}")
    if cost.break_even_price_usd is not None:
        lines.append(f"- **Break-even Price:** {fmt.format_currency(cost.break_even_price_usd)}")
    if cost.margin_percent is not None:
        lines.append(f"- **Margin:** {fmt.format_signed_percent(cost.margin_percent)}")
    return lines


def _market_section(price: PriceStats | None, profitability: ProfitabilityData | None) -> list[str]:
    lines = ["## 📈 Market Context", ""]
    if price is None:
        return lines + [fmt.unavailable(PRICE)]
    change = price.percent_change_24h
    lines += [
        f"- **BTC Price:** {fmt.format_currency(price.price)}",
        f"- **24h Change:** {fmt.trend_indicator(change)} {fmt.format_signed_percent(change)}",
    ]
    if profitability is not None and price.price > 0:
        sats = profitability.daily_revenue_per_th / price.price * 100_000_000
        lines.append(f"- **Daily Revenue in BTC:** {sats:,.0f} sats per TH")
    return lines


def _history_section(history: list[HashrateValuePoint] | None, days: int) -> list[str]:
    lines = ["## 📊 Historical Trends", ""]
    if history is None:
        return lines + [fmt.unavailable(HASH_VALUE_HISTORY)]
    recent = history[:days]
    if not recent:
        return lines + ["No hash value history reported for this period."]
    values = [p.hash_value_usd_per_th_day for p in recent]
    current, average = values[0], fmt.mean(values)
    trend = fmt.percent_change(current, average)
    if trend is None:
        direction = "➡️ Flat"
    elif trend > 5:
        direction = "📈 Above average"
    elif trend < -5:
        direction = "📉 Below average"
    else:
        direction = "➡️ Near average"
    return lines + [
        f"- **Period:** last {len(recent)} days",
        f"- **Current Hash Value:** ${current:.6f}/TH/day",
        f"- **Average Hash Value:** ${average:.6f}/TH/day",
        f"- **Range:** ${min(values):.6f} - ${max(values):.6f}",
        f"- **Current vs Average:** {fmt.format_optional_percent(trend)} ({direction})",
    ]


def _recommendations(
    profitability: ProfitabilityData | None,
    cost: CostToMineData | None,
    params: ProfitabilityDeepDiveInput,
) -> list[str]:
    lines = ["## 💡 Recommendations", ""]
    tips = []
    if profitability is not None:
        profit = profitability.net_daily_profit_per_th
        if profit <= 0:
            tips.append("Mining is loss-making at these parameters; pause or renegotiate power costs.")
        elif profit < 0.02:
            tips.append("Margins are thin; hedge price exposure and monitor difficulty closely.")
        else:
            tips.append("Margins are healthy; consider reinvesting in efficient hardware.")
        if params.electricity_cost_kwh > profitability.profitability_threshold_kwh * 0.8:
            tips.append("Electricity cost is close to the profitability threshold; seek cheaper power.")
    if params.hardware_efficiency_jth > 30:
        tips.append(
            f"Hardware at {params.hardware_efficiency_jth:.1f} J/TH is inefficient; "
            "newer models run below 20 J/TH."
        )
    if cost is not None and cost.margin_percent is not None and cost.margin_percent < 0:
        tips.append("Production cost exceeds market price; prioritise cost reduction.")
    if not tips:
        tips.append("Recommendations need profitability data; re-run the analysis later.")
    return lines + [f"- {tip}" for tip in tips]


def _risk_warnings(
    profitability: ProfitabilityData | None, price: PriceStats | None
) -> list[str]:
    warnings = []
    if profitability is not None and 0 < profitability.net_daily_profit_per_th < 0.01:
        warnings.append("Very thin margins: a small price drop or difficulty rise could cause losses.")
    if price is not None and abs(price.percent_change_24h) > 5:
        warnings.append(
            f"High price volatility: {fmt.format_signed_percent(price.percent_change_24h)} in 24h."
        )
    warnings.append("Difficulty adjusts every 2,016 blocks and can erode margins quickly.")
    return ["## ⚠️ Risk Warnings", "", *[f"- {w}" for w in warnings]]


def render_profitability_deep_dive(
    results: list[EndpointResult], params: ProfitabilityDeepDiveInput
) -> str:
    data = _values(results)
    profitability, cost, price = data[PROFITABILITY], data[COST_TO_MINE], data[PRICE]
    lines = [
        "# 💼 Mining Profitability Deep Dive",
        "",
        "## Input Parameters",
        "",
        f"- **Electricity Cost:** ${params.electricity_cost_kwh:.4f}/kWh",
        f"- **Hardware Efficiency:** {params.hardware_efficiency_jth:.1f} J/TH",
        "",
        *_executive_summary(profitability),
        "",
        *_break_even_section(profitability, cost, params),
        "",
        *_market_section(price, profitability),
    ]
    if params.include_historical:
        lines += ["", *_history_section(data[HASH_VALUE_HISTORY], params.historical_days)]
    lines += [
        "",
        *_recommendations(profitability, cost, params),
        "",
        *_risk_warnings(profitability, price),
    ]
    return _finish(lines, results)


class ProfitabilityDeepDiveTool:
    name = "braiins_profitability_deep_dive"
    description = (
        "Comprehensive mining profitability analysis combining the profitability calculator, "
        "cost to mine, market price and optional hash value trends, with recommendations."
    )
    category = ToolCategory.COMPOSITE
    input_model = ProfitabilityDeepDiveInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: ProfitabilityDeepDiveInput) -> str:
        sources = [
            (
                PROFITABILITY,
                self._client.get_profitability(
                    electricity_cost_kwh=params.electricity_cost_kwh,
                    hardware_efficiency_jth=params.hardware_efficiency_jth,
                ),
            ),
            (COST_TO_MINE, self._client.get_cost_to_mine(params.electricity_cost_kwh)),
            (PRICE, self._client.get_price_stats()),
        ]
        if params.include_historical:
            sources.append((HASH_VALUE_HISTORY, self._client.get_hashrate_value_history()))
        results = await gather_settled(sources)
        return render_profitability_deep_dive(results, params)


# ---------------------------------------------------------------------------
# Network health monitor
# ---------------------------------------------------------------------------

TRANSACTIONS = "Transactions"
HASHRATE_HISTORY = "Hashrate history"

HASHRATE_MAX = 40
MEMPOOL_MAX = 30
BLOCKS_MAX = 30


@dataclass
class ComponentScore:
    name: str
    score: int
    maximum: int
    measured: bool = True
    alerts: list[str] = field(default_factory=list)


def recent_window(
    history: list[HashrateDifficultyPoint], hours: int
) -> list[HashrateDifficultyPoint]:
    """Points within ``hours`` of the newest one. Unparsable timestamps keep everything."""
    if not history:
        return []
    newest = fmt.parse_timestamp(history[0].timestamp)
    if newest is None:
        return list(history)
    cutoff = newest - timedelta(hours=hours)
    window = []
    for point in history:
        moment = fmt.parse_timestamp(point.timestamp)
        if moment is None or moment >= cutoff:
            window.append(point)
    return window


def history_spread(points: list[HashrateDifficultyPoint]) -> float | None:
    """(max - min) / mean of the hashrate, in percent."""
    if len(points) < 2:
        return None
    rates = [p.hashrate_ehs for p in points]
    average = fmt.mean(rates)
    if average == 0:
        return None
    return (max(rates) - min(rates)) / average * 100


def score_hashrate(
    stats: HashrateStats | None, window: list[HashrateDifficultyPoint] | None
) -> ComponentScore:
    if stats is None:
        return ComponentScore("Hashrate Stability", HASHRATE_MAX // 2, HASHRATE_MAX, measured=False)
    result = ComponentScore("Hashrate Stability", HASHRATE_MAX, HASHRATE_MAX)
    deviation = fmt.percent_change(stats.current_hashrate, stats.hash_rate_30)
    if deviation is not None:
        size = abs(deviation)
        if size > 15:
            result.score -= 25
        elif size > 10:
            result.score -= 15
        elif size > 5:
            result.score -= 10
        elif size > 2:
            result.score -= 5
        if size > 10:
            result.alerts.append(
                f"Hashrate is {fmt.format_signed_percent(deviation)} away from its 30-day average"
            )
    spread = history_spread(window or [])
    if spread is not None and spread < 2:
        result.score = min(HASHRATE_MAX, result.score + 5)
    result.score = max(0, result.score)
    return result


def score_mempool(stats: TransactionStats | None) -> ComponentScore:
    if stats is None:
        return ComponentScore("Mempool & Fees", MEMPOOL_MAX // 2, MEMPOOL_MAX, measured=False)
    result = ComponentScore("Mempool & Fees", MEMPOOL_MAX, MEMPOOL_MAX)
    size, fee = stats.mempool_size, stats.avg_fee_sat_per_byte
    for threshold, penalty in ((100_000, 15), (50_000, 10), (20_000, 5), (10_000, 2)):
        if size > threshold:
            result.score -= penalty
            break
    for threshold, penalty in ((100, 10), (50, 8), (20, 5), (10, 2)):
        if fee > threshold:
            result.score -= penalty
            break
    if size > 50_000:
        result.alerts.append(f"Mempool is congested with {size:,} pending transactions")
    if fee > 50:
        result.alerts.append(f"Average fee is high at {fee:.1f} sat/vB")
    result.score = max(0, result.score)
    return result


def score_block_production(stats: DifficultyStats | None) -> ComponentScore:
    if stats is None:
        return ComponentScore("Block Production", BLOCKS_MAX // 2, BLOCKS_MAX, measured=False)
    result = ComponentScore("Block Production", BLOCKS_MAX, BLOCKS_MAX)
    change = abs(stats.estimated_change_percent)
    remaining = stats.blocks_until_adjustment
    if remaining is not None and remaining > 1900:
        # estimate is based on only a handful of blocks this early in the epoch
        result.score -= 10
    if remaining is not None and remaining < 100:
        if change > 10:
            result.score -= 10
            result.alerts.append(
                f"Large difficulty adjustment imminent: "
                f"{fmt.format_signed_percent(stats.estimated_change_percent)}"
            )
        elif change > 5:
            result.score -= 5
    result.score = max(0, result.score)
    return result


def estimated_block_time(change_percent: float) -> float | None:
    """Average minutes per block implied by the projected difficulty change."""
    factor = 1 + change_percent / 100
    if factor <= 0:
        return None
    return 10 / factor


def health_status(score: int) -> str:
    if score >= 80:
        return "🟢 Healthy"
    if score >= 50:
        return "🟡 Caution"
    return "🔴 Concern"


def render_network_health(results: list[EndpointResult], params: NetworkHealthInput) -> str:
    data = _values(results)
    hashrate, difficulty, transactions = data[HASHRATE], data[DIFFICULTY], data[TRANSACTIONS]
    history = data.get(HASHRATE_HISTORY)
    window = recent_window(history, params.history_hours) if history else None

    components = [
        score_hashrate(hashrate, window),
        score_mempool(transactions),
        score_block_production(difficulty),
    ]
    total = sum(c.score for c in components)

    lines = [
        "# 🏥 Bitcoin Network Health Monitor",
        "",
        f"## Overall Health: {health_status(total)} ({total}/100)",
        "",
        "| Component | Score |",
        "|-----------|-------|",
    ]
    for component in components:
        suffix = "" if component.measured else " (neutral)"
        lines.append(f"| {component.name} | {component.score}/{component.maximum}{suffix} |")

    lines += ["", "## ⚡ Hashrate Stability", ""]
    if hashrate is None:
        lines.append(fmt.unavailable(HASHRATE))
    else:
        lines += [
            f"- **Current Hashrate:** {hashrate.current_hashrate:.2f} EH/s",
            f"- **30-Day Average:** {hashrate.hash_rate_30:.2f} EH/s",
            "- **Deviation:** "
            + fmt.format_optional_percent(
                fmt.percent_change(hashrate.current_hashrate, hashrate.hash_rate_30)
            ),
        ]

    lines += ["", "## 📬 Mempool & Fees", ""]
    if transactions is None:
        lines.append(fmt.unavailable(TRANSACTIONS))
    else:
        lines += [
            f"- **Mempool Size:** {transactions.mempool_size:,} transactions",
            f"- **Average Fee:** {transactions.avg_fee_sat_per_byte:.2f} sat/vB",
        ]

    lines += ["", "## ⛏️ Block Production", ""]
    if difficulty is None:
        lines.append(fmt.unavailable(DIFFICULTY))
    else:
        change = difficulty.estimated_change_percent
        block_time = estimated_block_time(change)
        lines += [
            f"- **Estimated Difficulty Change:** {fmt.trend_indicator(change)} "
            f"{fmt.format_signed_percent(change)}",
            "- **Estimated Block Time:** "
            + ("N/A" if block_time is None else f"{block_time:.2f} minutes"),
        ]
        if difficulty.blocks_until_adjustment is not None:
            lines.append(f"- **Blocks Until Adjustment:** {difficulty.blocks_until_adjustment:,}")

    if params.include_detailed_history:
        lines += ["", f"## 📈 Hashrate Trend (last {params.history_hours}h)", ""]
        if history is None:
            lines.append(fmt.unavailable(HASHRATE_HISTORY))
        elif not window:
            lines.append("No history points reported for this window.")
        else:
            spread = history_spread(window)
            lines += [
                f"- **Data Points:** {len(window)}",
                f"- **Range:** {min(p.hashrate_ehs for p in window):.2f} - "
                f"{max(p.hashrate_ehs for p in window):.2f} EH/s",
                "- **Spread:** " + ("N/A" if spread is None else f"{spread:.2f}%"),
            ]

    alerts = [alert for c in components for alert in c.alerts]
    lines += ["", "## 🚨 Alerts", ""]
    lines += [f"- {alert}" for alert in alerts] if alerts else ["No active alerts."]
    return _finish(lines, results)


class NetworkHealthMonitorTool:
    name = "braiins_network_health_monitor"
    description = (
        "Assess Bitcoin network health with a 0-100 score built from hashrate stability, "
        "mempool congestion and block production, plus active alerts."
    )
    category = ToolCategory.COMPOSITE
    input_model = NetworkHealthInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NetworkHealthInput) -> str:
        sources = [
            (HASHRATE, self._client.get_hashrate_stats()),
            (DIFFICULTY, self._client.get_difficulty_stats()),
            (TRANSACTIONS, self._client.get_transaction_stats()),
        ]
        if params.include_detailed_history:
            sources.append((HASHRATE_HISTORY, self._client.get_hashrate_and_difficulty_history()))
        results = await gather_settled(sources)
        return render_network_health(results, params)
