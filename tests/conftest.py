"""Shared pytest fixtures – canned upstream payloads and a mocked Insights client."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

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
from insights_mcp.services.insights_client import InsightsClient
from insights_mcp.tools import create_tools


# ---------------------------------------------------------------------------
# Upstream payloads (shapes as served by insights.braiins.com)
# ---------------------------------------------------------------------------


@pytest.fixture
def hashrate_payload():
    return {
        "avg_fees_per_block": 0.125,
        "current_hashrate": 812.45,
        "current_hashrate_estimated": 815.3,
        "fees_percent": 3.25,
        "hash_price": 0.052,
        "hash_rate_30": 798.12,
        "hash_value": 5.4e-7,
        "monthly_avg_hashrate_change_1_year": {"relative": 0.032, "absolute": 25.1},
        "rev_usd": 45_000_000.0,
    }


@pytest.fixture
def difficulty_payload():
    return {
        "difficulty": 109_780_000_000_000_000.0,
        "estimated_next_diff": 112_500_000_000_000_000.0,
        "estimated_adjustment": 0.0248,
        "block_epoch": 437,
        "blocks_until_adjustment": 1024,
        "estimated_adjustment_date": "2025-12-20T10:00:00Z",
        "epoch_block_time": 585.0,
        "previous_adjustment": -0.012,
    }


@pytest.fixture
def price_payload():
    return {"price": 95_000.5, "percent_change_24h": 2.35, "timestamp": "2025-12-13T12:00:00Z"}


@pytest.fixture
def transaction_payload():
    return {
        "mempool_size": 12_345,
        "avg_fee_sat_per_byte": 15.5,
        "confirmation_time_blocks": 3,
        "tx_count_24h": 432_000,
    }


@pytest.fixture
def pools_payload():
    return [
        {"name": "Foundry USA", "hashrate_effective": 250.0, "blocks_mined": {"1d": {"absolute": 40}}},
        {"name": "AntPool", "hashrate_effective": 150.0, "blocks_mined": {"1w": {"absolute": 180}}},
        {"name": "ViaBTC", "hashrate_effective": 60.0},
        {"name": "Braiins Pool", "hashrate_effective": 30.0},
        {"name": "Solo", "hashrate_effective": 10.0},
    ]


@pytest.fixture
def rss_payload():
    return [
        {
            "title": "Older post",
            "link": "https://braiins.com/blog/older",
            "pubDate": "Mon, 01 Dec 2025 09:00:00 GMT",
            "description": "<p>Old <b>news</b></p>",
        },
        {
            "title": "Newest post",
            "link": "https://braiins.com/blog/newest",
            "pubDate": "Wed, 10 Dec 2025 09:00:00 GMT",
            "creator": "Braiins",
            "categories": ["Mining", "Firmware"],
        },
    ]


@pytest.fixture
def halvings_payload():
    return {
        "next_halving_date": "2028-04-15T00:00:00Z",
        "next_halving_block_height": 1_050_000,
        "blocks_remaining": 175_000,
        "current_block_height": 875_000,
        "current_reward_btc": 3.125,
        "next_reward_btc": 1.5625,
        "historical_halvings": [
            {"date": "2024-04-20T00:09:27Z", "block_height": 840_000, "reward_btc": 3.125},
            {"date": "2012-11-28T15:24:38Z", "block_height": 210_000, "reward_btc": 25.0},
        ],
    }


@pytest.fixture
def blocks_payload():
    return [
        {
            "height": 875_000 - i,
            "pool_name": pool,
            "timestamp": f"2025-12-13T1{i}:00:00Z",
            "transaction_count": 3000 + i,
            "size_mb": 1.5,
            "block_value_btc": 3.2,
            "block_value_usd": 304_000.0,
        }
        for i, pool in enumerate(["Foundry USA", "AntPool", "ViaBTC", "F2Pool", "Braiins Pool"])
    ]


@pytest.fixture
def profitability_payload():
    return {
        "daily_revenue_per_th": 0.052,
        "daily_electricity_cost_per_th": 0.03,
        "net_daily_profit_per_th": 0.022,
        "monthly_profit_per_th": 0.66,
        "annual_profit_per_th": 8.03,
        "btc_price_usd": 95_000.0,
        "network_difficulty": 109_780_000_000_000_000.0,
        "breakeven_btc_price": 55_000.0,
        "breakeven_hashrate_ths": 12.5,
        "profitability_threshold_kwh": 0.086,
        "timestamp": "2025-12-13T12:00:00Z",
    }


@pytest.fixture
def cost_payload():
    return {
        "cost_usd": 42_000.0,
        "electricity_cost_kwh": 0.05,
        "break_even_price_usd": 42_000.0,
        "margin_percent": 126.19,
    }


@pytest.fixture
def revenue_history_payload():
    return [
        {"date": f"2025-12-{day:02d}", "revenue_usd": 40_000_000.0 + day * 100_000}
        for day in range(13, 0, -1)
    ]


@pytest.fixture
def hash_diff_history_payload():
    return [
        {
            "timestamp": f"2025-12-13T{hour:02d}:00:00Z",
            "hashrate_ehs": 800.0 + hour,
            "difficulty": 109_780_000_000_000_000.0,
        }
        for hour in range(23, -1, -1)
    ]


@pytest.fixture
def hash_value_history_payload():
    return [
        {"date": f"2025-12-{day:02d}", "hash_value_usd_per_th_day": 0.05 + day * 0.001}
        for day in range(13, 0, -1)
    ]


@pytest.fixture
def fees_history_payload():
    return [
        {"date": f"2025-12-{day:02d}", "avg_fee_btc": 0.0002 + day * 0.00001, "avg_fee_usd": 19.0}
        for day in range(13, 0, -1)
    ]


# ---------------------------------------------------------------------------
# Mocked client and tool catalogue
# ---------------------------------------------------------------------------


@pytest.fixture
def client(
    hashrate_payload,
    difficulty_payload,
    price_payload,
    transaction_payload,
    pools_payload,
    rss_payload,
    halvings_payload,
    blocks_payload,
    profitability_payload,
    cost_payload,
    revenue_history_payload,
    hash_diff_history_payload,
    hash_value_history_payload,
    fees_history_payload,
):
    """An InsightsClient double whose methods return parsed canned payloads."""
    mock = AsyncMock(spec=InsightsClient)
    mock.get_hashrate_stats.return_value = HashrateStats.model_validate(hashrate_payload)
    mock.get_difficulty_stats.return_value = DifficultyStats.model_validate(difficulty_payload)
    mock.get_price_stats.return_value = PriceStats.model_validate(price_payload)
    mock.get_transaction_stats.return_value = TransactionStats.model_validate(transaction_payload)
    mock.get_pool_stats.return_value = [PoolEntry.model_validate(p) for p in pools_payload]
    mock.get_rss_feed_data.return_value = [RssItem.model_validate(i) for i in rss_payload]
    mock.get_halvings.return_value = HalvingData.model_validate(halvings_payload)
    mock.get_blocks.return_value = [Block.model_validate(b) for b in blocks_payload]
    mock.get_profitability.return_value = ProfitabilityData.model_validate(profitability_payload)
    mock.get_cost_to_mine.return_value = CostToMineData.model_validate(cost_payload)
    mock.get_daily_revenue_history.return_value = [
        DailyRevenue.model_validate(d) for d in revenue_history_payload
    ]
    mock.get_hashrate_and_difficulty_history.return_value = [
        HashrateDifficultyPoint.model_validate(d) for d in hash_diff_history_payload
    ]
    mock.get_hashrate_value_history.return_value = [
        HashrateValuePoint.model_validate(d) for d in hash_value_history_payload
    ]
    mock.get_transaction_fees_history.return_value = [
        TransactionFeePoint.model_validate(d) for d in fees_history_payload
    ]
    return mock


@pytest.fixture
def tools(client):
    return create_tools(client)


@pytest.fixture
def tool_by_name(tools):
    return {t.name: t for t in tools}
