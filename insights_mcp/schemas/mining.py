"""Upstream payloads for block and mining-economics endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from insights_mcp.schemas.network import Count, UpstreamModel


class Block(UpstreamModel):
    height: Count
    pool: str | None = Field(None, validation_alias=AliasChoices("pool", "pool_name"))
    timestamp: str
    transaction_count: Count | None = None
    size_mb: float | None = None
    block_value_btc: float | None = None
    block_value_usd: float | None = None
    hash: str | None = None


class ProfitabilityData(UpstreamModel):
    """GET /v2.0/profitability-calculator

    All per-TH values are daily unless the name says otherwise.
    """

    daily_revenue_per_th: float
    daily_electricity_cost_per_th: float
    net_daily_profit_per_th: float
    monthly_profit_per_th: float
    annual_profit_per_th: float
    btc_price_usd: float
    network_difficulty: float
    breakeven_btc_price: float
    roi_days: float | None = Field(None, description="Only present when hardware cost was supplied")
    breakeven_hashrate_ths: float
    profitability_threshold_kwh: float
    timestamp: str


class CostToMineData(UpstreamModel):
    """GET /v2.0/cost-to-mine"""

    cost_usd: float = Field(..., description="Cost to mine one BTC in USD")
    electricity_cost_kwh: float | None = None
    break_even_price_usd: float | None = None
    margin_percent: float | None = None
