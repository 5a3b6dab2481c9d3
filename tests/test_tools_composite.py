"""Tests for composite tools and their partial-failure behaviour."""

from __future__ import annotations

import pytest

from insights_mcp.errors import InsightsApiError, NetworkError
from insights_mcp.schemas.network import DifficultyStats, HashrateStats, TransactionStats
from insights_mcp.tools.composite import (
    estimated_block_time,
    health_status,
    score_block_production,
    score_hashrate,
    score_mempool,
)

RATE_LIMITED = InsightsApiError(429, "/v1.0/difficulty-stats", "Too Many Requests")


# ---------------------------------------------------------------------------
# Mining overview
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_overview_all_sources_ok(tool_by_name, client):
    result = await tool_by_name["braiins_mining_overview"].execute({})
    assert result.is_error is False
    text = result.text
    client.get_blocks.assert_awaited_once_with(page=1, page_size=5)
    assert text.count("| 87") == 5
    assert "unavailable" not in text
    assert "Data Availability Notice" not in text
    assert "812.45 EH/s" in text
    assert "$95,000.50" in text


@pytest.mark.asyncio
async def test_overview_survives_one_failure(tool_by_name, client):
    client.get_difficulty_stats.side_effect = RATE_LIMITED
    result = await tool_by_name["braiins_mining_overview"].execute({})
    assert result.is_error is False
    text = result.text
    assert text.count("Difficulty data unavailable") == 1
    assert "Difficulty data could not be retrieved (API error 429)" in text
    assert "812.45 EH/s" in text
    assert "$95,000.50" in text


@pytest.mark.asyncio
async def test_overview_failure_count_matches(tool_by_name, client):
    client.get_difficulty_stats.side_effect = RATE_LIMITED
    client.get_price_stats.side_effect = NetworkError("Request timeout after 10s")
    client.get_blocks.side_effect = RuntimeError("boom")
    text = (await tool_by_name["braiins_mining_overview"].execute({})).text
    assert text.count("data unavailable") == 3
    assert text.count("data could not be retrieved") == 3


@pytest.mark.asyncio
async def test_overview_all_sources_failing_is_still_a_report(tool_by_name, client):
    for method in (
        client.get_hashrate_stats,
        client.get_difficulty_stats,
        client.get_price_stats,
        client.get_blocks,
    ):
        method.side_effect = NetworkError("down")
    result = await tool_by_name["braiins_mining_overview"].execute({})
    assert result.is_error is False
    assert result.text.count("data unavailable") == 4


@pytest.mark.asyncio
async def test_overview_without_blocks_skips_fetch(tool_by_name, client):
    text = (
        await tool_by_name["braiins_mining_overview"].execute({"include_recent_blocks": False})
    ).text
    client.get_blocks.assert_not_called()
    assert "Recent Blocks" not in text


@pytest.mark.asyncio
async def test_overview_is_idempotent(tool_by_name):
    tool = tool_by_name["braiins_mining_overview"]
    first = await tool.execute({"include_recent_blocks": False})
    second = await tool.execute({"include_recent_blocks": False})
    assert first == second


@pytest.mark.asyncio
async def test_overview_invalid_input(tool_by_name, client):
    result = await tool_by_name["braiins_mining_overview"].execute({"block_count": 50})
    assert result.is_error is True
    assert "block_count" in result.text
    client.get_hashrate_stats.assert_not_called()


# ---------------------------------------------------------------------------
# Profitability deep dive
# ---------------------------------------------------------------------------

DEEP_DIVE_ARGS = {"electricity_cost_kwh": 0.05, "hardware_efficiency_jth": 25}


@pytest.mark.asyncio
async def test_deep_dive_full_report(tool_by_name, client):
    result = await tool_by_name["braiins_profitability_deep_dive"].execute(
        {**DEEP_DIVE_ARGS, "include_historical": True, "historical_days": 7}
    )
    assert result.is_error is False
    text = result.text
    client.get_hashrate_value_history.assert_awaited_once()
    assert "✅ Profitable (Profitable)" in text
    assert "$42,000.00" in text
    assert "- **Period:** last 7 days" in text
    assert "## 💡 Recommendations" in text
    assert "## ⚠️ Risk Warnings" in text
    assert "unavailable" not in text


@pytest.mark.asyncio
async def test_deep_dive_history_not_fetched_by_default(tool_by_name, client):
    text = (await tool_by_name["braiins_profitability_deep_dive"].execute(DEEP_DIVE_ARGS)).text
    client.get_hashrate_value_history.assert_not_called()
    assert "Historical Trends" not in text


@pytest.mark.asyncio
async def test_deep_dive_partial_failure(tool_by_name, client):
    client.get_cost_to_mine.side_effect = InsightsApiError(500, "/v2.0/cost-to-mine", "Server Error")
    client.get_hashrate_value_history.side_effect = NetworkError("down")
    text = (
        await tool_by_name["braiins_profitability_deep_dive"].execute(
            {**DEEP_DIVE_ARGS, "include_historical": True}
        )
    ).text
    assert text.count("data unavailable") == 2
    assert "Cost to mine data unavailable" in text
    assert "Hash value history data unavailable" in text
    assert "✅ Profitable" in text


@pytest.mark.asyncio
async def test_deep_dive_requires_parameters(tool_by_name):
    result = await tool_by_name["braiins_profitability_deep_dive"].execute({})
    assert result.is_error is True
    assert "electricity_cost_kwh" in result.text
    assert "hardware_efficiency_jth" in result.text


@pytest.mark.asyncio
async def test_deep_dive_flags_inefficient_hardware(tool_by_name):
    text = (
        await tool_by_name["braiins_profitability_deep_dive"].execute(
            {"electricity_cost_kwh": 0.05, "hardware_efficiency_jth": 38}
        )
    ).text
    assert "38.0 J/TH is inefficient" in text


# ---------------------------------------------------------------------------
# Network health monitor
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health_report(tool_by_name, client):
    result = await tool_by_name["braiins_network_health_monitor"].execute({})
    assert result.is_error is False
    text = result.text
    client.get_hashrate_and_difficulty_history.assert_not_called()
    assert "## Overall Health:" in text
    assert "| Hashrate Stability |" in text
    assert "No active alerts." in text
    assert "unavailable" not in text


@pytest.mark.asyncio
async def test_health_with_history(tool_by_name, client):
    text = (
        await tool_by_name["braiins_network_health_monitor"].execute(
            {"include_detailed_history": True, "history_hours": 6}
        )
    ).text
    client.get_hashrate_and_difficulty_history.assert_awaited_once()
    assert "## 📈 Hashrate Trend (last 6h)" in text
    # newest point is 23:00, so the window covers 17:00 through 23:00
    assert "- **Data Points:** 7" in text


@pytest.mark.asyncio
async def test_health_missing_source_scores_neutral(tool_by_name, client):
    client.get_transaction_stats.side_effect = RATE_LIMITED
    result = await tool_by_name["braiins_network_health_monitor"].execute({})
    assert result.is_error is False
    text = result.text
    assert "| Mempool & Fees | 15/30 (neutral) |" in text
    assert text.count("Transactions data unavailable") == 1


def test_hashrate_score_penalises_deviation(hashrate_payload):
    stable = HashrateStats.model_validate(hashrate_payload)
    assert score_hashrate(stable, None).score == 40
    shaky = HashrateStats.model_validate({**hashrate_payload, "current_hashrate": 950.0})
    scored = score_hashrate(shaky, None)
    assert scored.score == 15
    assert scored.alerts


def test_mempool_score(transaction_payload):
    calm = TransactionStats.model_validate(transaction_payload)
    assert score_mempool(calm).score == 30 - 2 - 2
    busy = TransactionStats.model_validate(
        {**transaction_payload, "mempool_size": 150_000, "avg_fee_sat_per_byte": 120.0}
    )
    scored = score_mempool(busy)
    assert scored.score == 5
    assert len(scored.alerts) == 2


def test_block_production_score(difficulty_payload):
    stats = DifficultyStats.model_validate(difficulty_payload)
    assert score_block_production(stats).score == 30
    early = DifficultyStats.model_validate({**difficulty_payload, "blocks_until_adjustment": 2000})
    assert score_block_production(early).score == 20
    imminent = DifficultyStats.model_validate(
        {**difficulty_payload, "blocks_until_adjustment": 50, "estimated_adjustment": 0.12}
    )
    scored = score_block_production(imminent)
    assert scored.score == 20
    assert scored.alerts


def test_estimated_block_time():
    assert estimated_block_time(0) == 10
    assert estimated_block_time(-100) is None
    assert round(estimated_block_time(25), 2) == 8.0


def test_health_status_bands():
    assert health_status(80) == "🟢 Healthy"
    assert health_status(79) == "🟡 Caution"
    assert health_status(49) == "🔴 Concern"
