"""Tool input models.

Each tool declares its accepted arguments as a closed pydantic model.  The
same model drives validation (every violated constraint is reported) and
the JSON schema advertised to MCP clients.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

InputT = TypeVar("InputT", bound="ToolInput")


class ToolInput(BaseModel):
    """Base for validated tool input. Unknown keys are dropped, not rejected."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


def validate_input(model: type[InputT], raw: Any) -> InputT:
    """Validate raw caller arguments. ``None`` means "use every default"."""
    return model.model_validate({} if raw is None else raw)


def _flatten_property(prop: dict[str, Any]) -> dict[str, Any]:
    prop = {k: v for k, v in prop.items() if k != "title"}
    variants = prop.pop("anyOf", None)
    if variants:
        concrete = [v for v in variants if v.get("type") != "null"]
        if len(concrete) == 1:
            prop = {**concrete[0], **prop}
    if "default" in prop and prop["default"] is None:
        del prop["default"]
    return prop


def build_input_schema(model: type[ToolInput]) -> dict[str, Any]:
    """Derive the MCP ``inputSchema`` object from an input model."""
    schema = model.model_json_schema()
    return {
        "type": "object",
        "properties": {
            name: _flatten_property(prop) for name, prop in schema.get("properties", {}).items()
        },
        "required": list(schema.get("required", [])),
    }


# ---------------------------------------------------------------------------
# Simple / parameterized tools
# ---------------------------------------------------------------------------


class NoInput(ToolInput):
    """Tools that take no arguments. Whatever the caller sends is discarded."""

    @model_validator(mode="before")
    @classmethod
    def _discard_arguments(cls, data: Any) -> dict[str, Any]:
        return {}


class BlocksInput(ToolInput):
    page: int = Field(1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(10, ge=1, le=100, description="Blocks per page (1-100)")
    start_date: str | None = Field(
        None, pattern=DATE_PATTERN, description="Only blocks on or after this date (YYYY-MM-DD)"
    )
    end_date: str | None = Field(
        None, pattern=DATE_PATTERN, description="Only blocks on or before this date (YYYY-MM-DD)"
    )

    @model_validator(mode="after")
    def _check_date_order(self) -> BlocksInput:
        # ISO dates compare correctly as strings
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class ProfitabilityInput(ToolInput):
    electricity_cost_kwh: float = Field(
        ..., ge=0, le=1, description="Electricity cost in USD per kWh (0-1)"
    )
    hardware_efficiency_jth: float = Field(
        ..., ge=1, le=200, description="Miner efficiency in joules per terahash (1-200)"
    )
    hardware_cost_usd: float | None = Field(
        None, ge=0, description="Upfront hardware cost in USD, enables ROI analysis"
    )


class CostToMineInput(ToolInput):
    electricity_cost_kwh: float | None = Field(
        None, ge=0, le=1, description="Electricity cost in USD per kWh (0-1)"
    )


# ---------------------------------------------------------------------------
# Historical tools
# ---------------------------------------------------------------------------


class HistoryInput(ToolInput):
    limit: int | None = Field(None, ge=1, le=365, description="Number of most recent days (1-365)")


class HashrateDifficultyHistoryInput(ToolInput):
    limit: int | None = Field(
        None, ge=1, le=1000, description="Number of most recent data points (1-1000)"
    )


# ---------------------------------------------------------------------------
# Composite tools
# ---------------------------------------------------------------------------


class MiningOverviewInput(ToolInput):
    include_recent_blocks: bool = Field(True, description="Include the recent blocks section")
    block_count: int = Field(5, ge=1, le=20, description="Number of recent blocks to show (1-20)")


class ProfitabilityDeepDiveInput(ToolInput):
    electricity_cost_kwh: float = Field(
        ..., ge=0, le=1, description="Electricity cost in USD per kWh (0-1)"
    )
    hardware_efficiency_jth: float = Field(
        ..., ge=1, le=200, description="Miner efficiency in joules per terahash (1-200)"
    )
    include_historical: bool = Field(False, description="Include hash value trend analysis")
    historical_days: int = Field(30, ge=7, le=90, description="Days of history to analyse (7-90)")


class NetworkHealthInput(ToolInput):
    include_detailed_history: bool = Field(
        False, description="Include hashrate/difficulty history in the stability analysis"
    )
    history_hours: int = Field(24, ge=6, le=168, description="History window in hours (6-168)")
