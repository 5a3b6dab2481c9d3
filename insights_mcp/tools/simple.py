"""Simple tools: no arguments, one upstream call, one report."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from insights_mcp.schemas.common import ToolResult
from insights_mcp.schemas.inputs import NoInput
from insights_mcp.schemas.network import (
    DifficultyStats,
    HalvingData,
    HashrateStats,
    HistoricalHalving,
    PoolEntry,
    PriceStats,
    RssItem,
    TransactionStats,
)
from insights_mcp.services import formatting as fmt
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools.base import FOOTER, ToolCategory, describe, run_tool

POOL_TABLE_CAP = 15
RSS_POST_CAP = 10


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def render_hashrate_stats(stats: HashrateStats) -> str:
    trend = stats.monthly_avg_hashrate_change_1_year
    relative_pct = trend.relative * 100
    lines = [
        "# 📊 Bitcoin Network Hashrate Statistics",
        "",
        "## Current Metrics",
        "",
        f"- **Current Hashrate:** {stats.current_hashrate:.2f} EH/s",
        f"- **Estimated Hashrate:** {stats.current_hashrate_estimated:.2f} EH/s",
        f"- **30-Day Average:** {stats.hash_rate_30:.2f} EH/s",
        "",
        "## Mining Economics",
        "",
        f"- **Hash Price:** ${stats.hash_price:.3f} per TH/day",
        f"- **Hash Value:** ${fmt.format_small(stats.hash_value)} per TH/day",
        f"- **Daily Network Revenue:** {fmt.format_currency(stats.rev_usd)}",
        "",
        "## Transaction Fees",
        "",
        f"- **Average Fees per Block:** {stats.avg_fees_per_block:.3f} BTC",
        f"- **Fees as % of Revenue:** {stats.fees_percent:.2f}%",
        "",
        "## 1-Year Trend",
        "",
        f"- **Relative Change:** {fmt.trend_indicator(relative_pct)} "
        f"{fmt.format_signed_percent(relative_pct)}",
        f"- **Absolute Change:** {trend.absolute:.2f} EH/s",
        "",
        "---",
        "",
        FOOTER,
    ]
    return "\n".join(lines)


def render_difficulty_stats(stats: DifficultyStats) -> str:
    change = stats.estimated_change_percent
    lines = [
        "# ⛏️ Bitcoin Network Difficulty Statistics",
        "",
        "## Current Metrics",
        "",
        f"- **Current Difficulty:** {fmt.format_difficulty(stats.difficulty)}",
        f"- **Block Epoch:** {stats.block_epoch:,}",
    ]
    if stats.epoch_block_time is not None:
        lines.append(f"- **Average Block Time (epoch):** {stats.epoch_block_time / 60:.2f} minutes")

    lines += [
        "",
        "## Next Adjustment",
        "",
        f"- **Estimated Next Difficulty:** {fmt.format_difficulty(stats.estimated_next_diff)}",
        f"- **Estimated Change:** {fmt.trend_indicator(change)} {fmt.format_signed_percent(change)}",
    ]
    if stats.blocks_until_adjustment is not None:
        lines.append(f"- **Blocks Until Adjustment:** {stats.blocks_until_adjustment:,}")
    if stats.estimated_adjustment_date:
        lines.append(
            "- **Estimated Adjustment Time:** "
            + fmt.format_timestamp(stats.estimated_adjustment_date, "%a, %d %b %Y %H:%M:%S UTC")
        )

    history = []
    if stats.previous_adjustment is not None:
        history.append(
            f"- **Previous Adjustment:** {fmt.format_signed_percent(stats.previous_adjustment * 100)}"
        )
    if stats.year_difficulty_change is not None:
        history.append(
            f"- **1-Year Change:** {fmt.format_signed_percent(stats.year_difficulty_change * 100)}"
        )
    if history:
        lines += ["", "## History", "", *history]

    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


def render_price_stats(stats: PriceStats) -> str:
    change = stats.percent_change_24h
    lines = [
        "# 💰 Bitcoin Price Statistics",
        "",
        "## Current Price",
        "",
        f"- **Price (USD):** {fmt.format_currency(stats.price)}",
        f"- **24h Change:** {fmt.trend_indicator(change)} {fmt.format_signed_percent(change)}",
    ]
    if stats.market_cap_usd is not None:
        lines.append(f"- **Market Cap:** {fmt.format_currency(stats.market_cap_usd)}")
    if stats.volume_24h_usd is not None:
        lines.append(f"- **24h Volume:** {fmt.format_currency(stats.volume_24h_usd)}")
    if stats.timestamp:
        lines.append(f"- **Last Updated:** {fmt.format_timestamp(stats.timestamp)}")
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


def render_transaction_stats(stats: TransactionStats) -> str:
    lines = [
        "# 💳 Bitcoin Transaction Statistics",
        "",
        "## Mempool Metrics",
        "",
        f"- **Mempool Size:** {stats.mempool_size:,} transactions "
        f"{_mempool_indicator(stats.mempool_size)}",
        f"- **Average Fee:** {stats.avg_fee_sat_per_byte:.2f} sat/vB "
        f"{_fee_indicator(stats.avg_fee_sat_per_byte)}",
    ]
    if stats.confirmation_time_blocks is not None:
        lines.append(
            f"- **Estimated Confirmation Time:** ~{stats.confirmation_time_blocks} blocks "
            f"({_confirmation_time(stats.confirmation_time_blocks)})"
        )
    if stats.tx_count_24h is not None:
        lines += [
            "",
            "## Network Activity (24h)",
            "",
            f"- **Total Transactions:** {stats.tx_count_24h:,}",
            f"- **Average Tx/Block:** {stats.tx_count_24h / 144:,.0f} (assuming ~144 blocks/day)",
        ]
    lines += ["", "## Recommendations", "", _fee_advice(stats.avg_fee_sat_per_byte)]
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


def _mempool_indicator(size: int) -> str:
    if size < 5_000:
        return "✅ (Low congestion)"
    if size < 50_000:
        return "⚠️ (Moderate congestion)"
    if size < 100_000:
        return "🔶 (High congestion)"
    return "🔴 (Very high congestion)"


def _fee_indicator(fee: float) -> str:
    if fee < 5:
        return "✅ (Low fees)"
    if fee < 20:
        return "⚠️ (Moderate fees)"
    if fee < 50:
        return "🔶 (High fees)"
    return "🔴 (Very high fees)"


def _fee_advice(fee: float) -> str:
    if fee < 5:
        return "- Good time for low-priority transactions and UTXO consolidation."
    if fee < 20:
        return "- Normal conditions; standard fee estimates should confirm within a few blocks."
    return "- Fees are elevated; consider waiting for non-urgent transactions."


def _confirmation_time(blocks: int) -> str:
    minutes = blocks * 10
    if minutes < 60:
        return f"~{minutes} minutes"
    return f"~{minutes / 60:.1f} hours"


def render_pool_stats(pools: list[PoolEntry]) -> str:
    if not pools:
        return "\n".join(
            [
                "# 🏊 Bitcoin Mining Pool Statistics",
                "",
                "No pool data available.",
                "",
                "---",
                "",
                FOOTER,
            ]
        )

    ranked = sorted(pools, key=lambda p: p.hashrate_effective, reverse=True)
    total = sum(p.hashrate_effective for p in ranked)
    shares = [fmt.percent_of(p.hashrate_effective, total) for p in ranked]

    lines = [
        "# 🏊 Bitcoin Mining Pool Statistics",
        "",
        "| Rank | Pool Name | Hashrate (EH/s) | Network % | Blocks (24h) | Blocks (1w) |",
        "|------|-----------|-----------------|-----------|--------------|-------------|",
    ]
    for rank, (pool, share) in enumerate(zip(ranked[:POOL_TABLE_CAP], shares), start=1):
        mined = pool.blocks_mined
        day = mined.day.absolute if mined and mined.day else 0
        week = mined.week.absolute if mined and mined.week else 0
        lines.append(
            f"| {rank} | {pool.name or 'Unknown'} | {pool.hashrate_effective:.2f} | "
            f"{share:.2f}% | {day} | {week} |"
        )
    note = fmt.truncation_note(POOL_TABLE_CAP, len(ranked), "total pools")
    if note:
        lines += ["", note]

    lines += [
        "",
        "## Decentralization Metrics",
        "",
        f"- **Total Pools Tracked:** {len(ranked)}",
        f"- **Total Network Hashrate:** {total:.2f} EH/s",
        f"- **Top 3 Pools Control:** {sum(shares[:3]):.2f}% of network",
        f"- **Top 5 Pools Control:** {sum(shares[:5]):.2f}% of network",
        "",
        "## Distribution Analysis",
        "",
        f"- **Large Pools (>10%):** {sum(1 for s in shares if s > 10)}",
        f"- **Medium Pools (5-10%):** {sum(1 for s in shares if 5 <= s <= 10)}",
        f"- **Small Pools (<5%):** {sum(1 for s in shares if s < 5)}",
        "",
        "---",
        "",
        FOOTER,
    ]
    return "\n".join(lines)


def _newest_first(items: list[RssItem]) -> list[RssItem]:
    dated = [(fmt.parse_timestamp(item.pub_date), item) for item in items]
    known = sorted((pair for pair in dated if pair[0] is not None), key=lambda p: p[0], reverse=True)
    unknown = [item for moment, item in dated if moment is None]
    return [item for _, item in known] + unknown


def render_rss_feed(items: list[RssItem]) -> str:
    lines = ["# 📰 Braiins Insights News & Updates", ""]
    if not items:
        lines += ["No recent posts available.", "", "---", "", FOOTER]
        return "\n".join(lines)

    ordered = _newest_first(items)
    shown = ordered[:RSS_POST_CAP]
    lines.append(f"**Latest {len(shown)} posts**")
    note = fmt.truncation_note(len(shown), len(ordered), "total posts")
    if note:
        lines += ["", note]

    for index, item in enumerate(shown, start=1):
        lines += ["", f"## {index}. [{item.title}]({item.link})", ""]
        meta = [f"📅 {fmt.format_timestamp(item.pub_date)}"]
        if item.creator:
            meta.append(f"✍️ {item.creator}")
        lines.append(" | ".join(meta))
        if item.categories:
            lines.append(f"🏷️ {', '.join(item.categories)}")
        if item.description:
            summary = fmt.truncate_text(fmt.strip_html(item.description))
            if summary:
                lines += ["", summary]

    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


def halving_countdown(target: str, now: datetime | None = None) -> str:
    moment = fmt.parse_timestamp(target)
    if moment is None:
        return "Unable to calculate"
    seconds = (moment - (now or fmt.utcnow())).total_seconds()
    if seconds <= 0:
        return "Halving has already occurred"
    days = int(seconds // 86_400)
    hours = int(seconds % 86_400 // 3_600)
    if days > 365:
        years, remaining = divmod(days, 365)
        return f"~{years} year{'s' if years > 1 else ''}, {remaining} days"
    return f"{days} days, {hours} hours"


def _halving_rows(events: list[HistoricalHalving]) -> list[str]:
    rows = [
        "| Halving | Date | Block Height | Block Reward |",
        "|---------|------|--------------|--------------|",
    ]
    for index, event in enumerate(sorted(events, key=lambda e: e.block_height), start=1):
        number = event.halving_number if event.halving_number is not None else index
        rows.append(
            f"| {fmt.ordinal(number)} | {fmt.format_timestamp(event.date, '%B %d %Y')} | "
            f"{event.block_height:,} | {event.reward_btc:g} BTC |"
        )
    return rows


def render_halvings(data: HalvingData) -> str:
    reduction = 100 - fmt.percent_of(data.next_reward_btc, data.current_reward_btc)
    lines = [
        "# ⏳ Bitcoin Halving Schedule",
        "",
        "## Next Halving",
        "",
        f"- **Estimated Date:** {fmt.format_timestamp(data.next_halving_date)}",
        f"- **Countdown:** {halving_countdown(data.next_halving_date)}",
        f"- **Block Height:** {data.next_halving_block_height:,}",
    ]
    if data.current_block_height is not None:
        lines.append(f"- **Current Block Height:** {data.current_block_height:,}")
    lines += [
        f"- **Blocks Remaining:** {data.blocks_remaining:,}",
        f"- **Current Block Reward:** {data.current_reward_btc:g} BTC",
        f"- **Next Block Reward:** {data.next_reward_btc:g} BTC",
    ]
    if data.current_reward_btc:
        lines.append(f"- **Reward Reduction:** {reduction:.0f}%")
    if data.historical_halvings:
        lines += ["", "## Historical Halvings", "", *_halving_rows(data.historical_halvings)]
    lines += ["", "---", "", FOOTER]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class HashrateStatsTool:
    name = "braiins_hashrate_stats"
    description = (
        "Get current Bitcoin network hashrate statistics: current and 30-day average hashrate, "
        "hash price, hash value, transaction fees and the one-year hashrate trend."
    )
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_hashrate_stats(await self._client.get_hashrate_stats())


class DifficultyStatsTool:
    name = "braiins_difficulty_stats"
    description = (
        "Get current Bitcoin network difficulty, the estimated next difficulty adjustment "
        "and its timing."
    )
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_difficulty_stats(await self._client.get_difficulty_stats())


class PriceStatsTool:
    name = "braiins_price_stats"
    description = "Get the current Bitcoin price in USD and its 24-hour change."
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_price_stats(await self._client.get_price_stats())


class PoolStatsTool:
    name = "braiins_pool_stats"
    description = (
        "Get the Bitcoin mining pool distribution ranked by hashrate, with blocks mined "
        "and decentralization metrics."
    )
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_pool_stats(await self._client.get_pool_stats())


class RssFeedTool:
    name = "braiins_rss_feed_data"
    description = "Get the latest posts and announcements from the Braiins blog and news feed."
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_rss_feed(await self._client.get_rss_feed_data())


class HalvingsTool:
    name = "braiins_halvings"
    description = (
        "Get the Bitcoin halving schedule: next halving date and block, countdown, "
        "reward change and historical halvings."
    )
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_halvings(await self._client.get_halvings())


class TransactionStatsTool:
    name = "braiins_transaction_stats"
    description = (
        "Get mempool size, average fee rate, estimated confirmation time and "
        "24-hour transaction activity."
    )
    category = ToolCategory.SIMPLE
    input_model = NoInput

    def __init__(self, client: InsightsClient) -> None:
        self._client = client
        self.descriptor = describe(self)
        self.input_schema = self.descriptor.schema_copy()

    async def execute(self, raw: Any = None) -> ToolResult:
        return await run_tool(self, raw, self._report)

    async def _report(self, params: NoInput) -> str:
        return render_transaction_stats(await self._client.get_transaction_stats())
