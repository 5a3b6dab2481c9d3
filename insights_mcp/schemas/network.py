"""Upstream payloads for network-level statistics endpoints."""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UpstreamModel(BaseModel):
    """Base for upstream bodies: strict primitive types, unknown keys ignored."""

    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)


# Counts and heights may arrive as whole-number floats (12345.0); fractions still fail.
Count = Annotated[int, Field(strict=False)]


class MonthlyHashrateChange(UpstreamModel):
    relative: float = Field(..., description="Relative change as a fraction (0.03 = 3%)")
    absolute: float = Field(..., description="Absolute change in EH/s")


class HashrateStats(UpstreamModel):
    """GET /v1.0/hashrate-stats"""

    avg_fees_per_block: float
    current_hashrate: float
    current_hashrate_estimated: float
    fees_percent: float
    hash_price: float
    hash_rate_30: float
    hash_value: float
    monthly_avg_hashrate_change_1_year: MonthlyHashrateChange
    rev_usd: float


class DifficultyStats(UpstreamModel):
    """GET /v1.0/difficulty-stats"""

    difficulty: float
    estimated_next_diff: float
    estimated_adjustment: float = Field(..., description="Fractional change (0.025 = +2.5%)")
    block_epoch: Count
    blocks_until_adjustment: Count | None = None
    estimated_adjustment_date: str | None = None
    epoch_block_time: float | None = Field(None, description="Average block time this epoch, seconds")
    previous_adjustment: float | None = None
    year_difficulty_change: float | None = None

    @property
    def estimated_change_percent(self) -> float:
        return self.estimated_adjustment * 100


class PriceStats(UpstreamModel):
    """GET /v1.0/price-stats"""

    price: float
    percent_change_24h: float
    timestamp: str | None = None
    market_cap_usd: float | None = None
    volume_24h_usd: float | None = None


class TransactionStats(UpstreamModel):
    """GET /v1.0/transaction-stats"""

    mempool_size: Count
    avg_fee_sat_per_byte: float
    confirmation_time_blocks: Count | None = None
    tx_count_24h: Count | None = None


class BlockCount(UpstreamModel):
    absolute: Count
    relative: float | None = None


class BlocksMined(UpstreamModel):
    day: BlockCount | None = Field(None, alias="1d")
    week: BlockCount | None = Field(None, alias="1w")
    five_days: BlockCount | None = Field(None, alias="5d")
    five_weeks: BlockCount | None = Field(None, alias="5w")


class PoolEntry(UpstreamModel):
    name: str
    hashrate_effective: float
    hashrate_percent: float | None = None
    blocks_mined: BlocksMined | None = None


class RssItem(UpstreamModel):
    title: str
    link: str
    pub_date: str = Field(..., validation_alias=AliasChoices("pubDate", "pub_date", "date"))
    description: str | None = None
    creator: str | None = None
    categories: list[str] | None = None


class HistoricalHalving(UpstreamModel):
    date: str
    block_height: Count
    reward_btc: float
    halving_number: Count | None = None


class HalvingData(UpstreamModel):
    """GET /v2.0/halvings"""

    next_halving_date: str
    next_halving_block_height: Count
    blocks_remaining: Count
    current_block_height: Count | None = None
    current_reward_btc: float
    next_reward_btc: float
    historical_halvings: list[HistoricalHalving] | None = None
