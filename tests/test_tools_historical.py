"""Tests for the historical series tools."""

from __future__ import annotations

import pytest

from insights_mcp.schemas.history import HashrateValuePoint
from insights_mcp.tools.historical import fee_market, render_hashrate_value


@pytest.mark.asyncio
async def test_daily_revenue_summary_and_cap(tool_by_name):
    result = await tool_by_name["braiins_daily_revenue_history"].execute({})
    assert result.is_error is False
    text = result.text
    assert "- **Data Points:** 13" in text
    assert "- **Date Range:** 2025-12-01 to 2025-12-13" in text
    assert "$41,300,000.00" in text
    # table shows the ten most recent rows
    assert "| 2025-12-04 |" in text
    assert "| 2025-12-03 |" not in text
    assert "*Showing 10 of 13 data points*" in text


@pytest.mark.asyncio
async def test_limit_slices_most_recent(tool_by_name):
    text = (await tool_by_name["braiins_daily_revenue_history"].execute({"limit": 3})).text
    assert "- **Data Points:** 3 (of 13 total)" in text
    assert "- **Date Range:** 2025-12-11 to 2025-12-13" in text
    assert "Showing" not in text


@pytest.mark.asyncio
async def test_limit_out_of_range_is_error(tool_by_name, client):
    result = await tool_by_name["braiins_daily_revenue_history"].execute({"limit": 366})
    assert result.is_error is True
    assert "limit" in result.text
    client.get_daily_revenue_history.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_history(tool_by_name, client):
    client.get_transaction_fees_history.return_value = []
    result = await tool_by_name["braiins_transaction_fees_history"].execute({})
    assert result.is_error is False
    assert "No Data Available" in result.text


@pytest.mark.asyncio
async def test_hashrate_and_difficulty(tool_by_name):
    text = (await tool_by_name["braiins_hashrate_and_difficulty_history"].execute({})).text
    assert "- **Current Hashrate:** 823.00 EH/s" in text
    assert "- **Peak Hashrate:** 823.00 EH/s" in text
    assert "- **Lowest Hashrate:** 800.00 EH/s" in text
    assert "1.10e+17 (109.78P)" in text
    assert "*Showing 15 of 24 data points*" in text


@pytest.mark.asyncio
async def test_hashrate_difficulty_accepts_larger_limit(tool_by_name):
    result = await tool_by_name["braiins_hashrate_and_difficulty_history"].execute({"limit": 1000})
    assert result.is_error is False


@pytest.mark.asyncio
async def test_hash_value_daily_change(tool_by_name):
    text = (await tool_by_name["braiins_hashrate_value_history"].execute({"limit": 2})).text
    # 0.063 vs 0.062 the day before
    assert "| 2025-12-13 | $0.063000 | +1.61% |" in text
    assert "| 2025-12-12 | $0.062000 | N/A |" in text


def test_hash_value_zero_baseline_is_not_applicable():
    points = [
        HashrateValuePoint(date="2025-12-02", hash_value_usd_per_th_day=0.05),
        HashrateValuePoint(date="2025-12-01", hash_value_usd_per_th_day=0.0),
    ]
    text = render_hashrate_value(points, 2)
    assert "- **Period Change:** N/A" in text
    assert "| 2025-12-02 | $0.050000 | N/A |" in text


@pytest.mark.asyncio
async def test_transaction_fees(tool_by_name):
    text = (await tool_by_name["braiins_transaction_fees_history"].execute({"limit": 1})).text
    # 0.00033 BTC = 33,000 sats
    assert "| 2025-12-13 | 0.000330 | 33,000 | $19.00 |" in text


def test_fee_market_context():
    assert "elevated" in fee_market(10, 5)
    assert "low" in fee_market(1, 5)
    assert "normal" in fee_market(5, 5)
