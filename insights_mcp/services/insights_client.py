"""Async HTTP gateway to the Braiins Insights API.

One method per upstream resource.  Each method issues a single GET, maps
transport failures to :class:`NetworkError` and non-2xx statuses to
:class:`InsightsApiError`, then validates the JSON body against a pydantic
model so callers only ever see typed data.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from insights_mcp.config import settings
from insights_mcp.errors import (
    InsightsApiError,
    NetworkError,
    ResponseValidationError,
    validation_issues,
)
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

logger = logging.getLogger("insights.client")

T = TypeVar("T")

_HASHRATE = TypeAdapter(HashrateStats)
_DIFFICULTY = TypeAdapter(DifficultyStats)
_PRICE = TypeAdapter(PriceStats)
_TRANSACTIONS = TypeAdapter(TransactionStats)
_POOLS = TypeAdapter(list[PoolEntry])
_RSS = TypeAdapter(list[RssItem])
_HALVINGS = TypeAdapter(HalvingData)
_BLOCKS = TypeAdapter(list[Block])
_PROFITABILITY = TypeAdapter(ProfitabilityData)
_COST_TO_MINE = TypeAdapter(CostToMineData)
_DAILY_REVENUE = TypeAdapter(list[DailyRevenue])
_HASH_DIFF = TypeAdapter(list[HashrateDifficultyPoint])
_HASH_VALUE = TypeAdapter(list[HashrateValuePoint])
_TX_FEES = TypeAdapter(list[TransactionFeePoint])


def _unwrap(payload: Any, key: str) -> Any:
    """Some list endpoints answer either ``[...]`` or ``{key: [...]}``."""
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return payload


class InsightsClient:
    """Read-only client for https://insights.braiins.com/api."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.insights_api_base_url).rstrip("/")
        self.timeout = settings.insights_api_timeout if timeout is None else timeout
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            follow_redirects=True,
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent or settings.insights_user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> InsightsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Transport ────────────────────────────────────────────────────────

    async def _request(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug("GET %s params=%s", endpoint, query)
        try:
            # bound the whole request, not just each connect/read phase
            async with asyncio.timeout(self.timeout):
                response = await self._http.get(endpoint, params=query)
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise NetworkError(f"Request timeout after {self.timeout:g}s", cause=exc) from exc
        except httpx.HTTPError as exc:
            detail = str(exc) or type(exc).__name__
            raise NetworkError(f"Network request failed: {detail}", cause=exc) from exc

        if not response.is_success:
            logger.info("GET %s -> %s", endpoint, response.status_code)
            raise InsightsApiError(response.status_code, endpoint, response.reason_phrase)

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseValidationError(endpoint, [f"body: invalid JSON ({exc})"]) from exc

    @staticmethod
    def _parse(endpoint: str, adapter: TypeAdapter[T], payload: Any) -> T:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            raise ResponseValidationError(endpoint, validation_issues(exc)) from exc

    async def _fetch(
        self, endpoint: str, adapter: TypeAdapter[T], params: dict[str, Any] | None = None
    ) -> T:
        return self._parse(endpoint, adapter, await self._request(endpoint, params))

    # ── v1.0 statistics ──────────────────────────────────────────────────

    async def get_hashrate_stats(self) -> HashrateStats:
        return await self._fetch("/v1.0/hashrate-stats", _HASHRATE)

    async def get_difficulty_stats(self) -> DifficultyStats:
        return await self._fetch("/v1.0/difficulty-stats", _DIFFICULTY)

    async def get_price_stats(self) -> PriceStats:
        return await self._fetch("/v1.0/price-stats", _PRICE)

    async def get_transaction_stats(self) -> TransactionStats:
        return await self._fetch("/v1.0/transaction-stats", _TRANSACTIONS)

    async def get_pool_stats(self) -> list[PoolEntry]:
        endpoint = "/v1.0/pool-stats"
        payload = await self._request(endpoint)
        return self._parse(endpoint, _POOLS, _unwrap(payload, "pools"))

    async def get_rss_feed_data(self) -> list[RssItem]:
        endpoint = "/v1.0/rss-feed-data"
        payload = await self._request(endpoint)
        return self._parse(endpoint, _RSS, _unwrap(payload, "items"))

    async def get_blocks(
        self,
        page: int = 1,
        page_size: int = 10,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[Block]:
        return await self._fetch(
            "/v1.0/blocks",
            _BLOCKS,
            {"page": page, "page_size": page_size, "start_date": start_date, "end_date": end_date},
        )

    # ── v1.0 history (most recent first) ─────────────────────────────────

    async def get_daily_revenue_history(self) -> list[DailyRevenue]:
        return await self._fetch("/v1.0/daily-revenue-history", _DAILY_REVENUE)

    async def get_hashrate_and_difficulty_history(self) -> list[HashrateDifficultyPoint]:
        return await self._fetch("/v1.0/hashrate-and-difficulty-history", _HASH_DIFF)

    async def get_hashrate_value_history(self) -> list[HashrateValuePoint]:
        return await self._fetch("/v1.0/hashrate-value-history", _HASH_VALUE)

    async def get_transaction_fees_history(self) -> list[TransactionFeePoint]:
        return await self._fetch("/v1.0/transaction-fees-history", _TX_FEES)

    # ── v2.0 ─────────────────────────────────────────────────────────────

    async def get_halvings(self) -> HalvingData:
        return await self._fetch("/v2.0/halvings", _HALVINGS)

    async def get_profitability(
        self,
        electricity_cost_kwh: float,
        hardware_efficiency_jth: float,
        hardware_cost_usd: float | None = None,
    ) -> ProfitabilityData:
        return await self._fetch(
            "/v2.0/profitability-calculator",
            _PROFITABILITY,
            {
                "electricity_cost_kwh": electricity_cost_kwh,
                "hardware_efficiency_jth": hardware_efficiency_jth,
                "hardware_cost_usd": hardware_cost_usd,
            },
        )

    async def get_cost_to_mine(self, electricity_cost_kwh: float | None = None) -> CostToMineData:
        return await self._fetch(
            "/v2.0/cost-to-mine",
            _COST_TO_MINE,
            {"electricity_cost_kwh": electricity_cost_kwh},
        )
