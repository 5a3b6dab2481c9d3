"""Upstream payloads for historical series. Every series is most recent first."""

from __future__ import annotations

from insights_mcp.schemas.network import UpstreamModel


class DailyRevenue(UpstreamModel):
    date: str
    revenue_usd: float
    block_rewards_btc: float | None = None
    fees_btc: float | None = None


class HashrateDifficultyPoint(UpstreamModel):
    timestamp: str
    hashrate_ehs: float
    difficulty: float


class HashrateValuePoint(UpstreamModel):
    date: str
    hash_value_usd_per_th_day: float


class TransactionFeePoint(UpstreamModel):
    date: str
    avg_fee_btc: float
    avg_fee_usd: float | None = None
