from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DailyBar(BaseModel):
    """One OHLCV aggregate bar, parsed from the upstream short keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    open: float = Field(alias="o")
    high: float = Field(alias="h")
    low: float = Field(alias="l")
    close: float = Field(alias="c")
    volume: float = Field(alias="v")
    vwap: float | None = Field(default=None, alias="vw")
    timestamp: int = Field(alias="t")  # epoch ms
    transactions: int | None = Field(default=None, alias="n")


class TickerSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    ticker: str
    close: float
    high: float
    low: float
    open: float
    volume: float
    vwap: float | None = None
    timestamp: int | None = None
    transactions: int | None = None


class TickerResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    ticker: str
    previous_day: TickerSummary
    aggregates: list[DailyBar]


class AggregatesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str = ""
    ticker: str | None = None
    adjusted: bool | None = None
    queryCount: int | None = None
    resultsCount: int | None = None
    results: list[DailyBar] | None = None
    request_id: str | None = None
