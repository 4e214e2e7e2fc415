from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from mag7.schemas.market import DailyBar, TickerSummary

ChartMode = Literal["raw", "indexed"]


class TickerInfoView(BaseModel):
    ticker: str
    name: str
    color: str
    enabled: bool


class TickerCard(BaseModel):
    ticker: str
    name: str
    color: str
    previous_day: TickerSummary
    change: float
    change_percent: float | None
    is_positive: bool
    volume_millions: float


class Performer(BaseModel):
    ticker: str
    change_percent: float


class MarketStats(BaseModel):
    best_performer: Performer
    worst_performer: Performer
    average_move_percent: float
    gainers: int
    losers: int
    unchanged: int
    excluded: list[str] = []


class ChartResponse(BaseModel):
    mode: ChartMode
    tickers: list[str]
    points: list[dict[str, float | int]]


class DashboardResponse(BaseModel):
    fetched_at: datetime
    tickers: list[str]
    cards: list[TickerCard]
    stats: MarketStats
    chart: ChartResponse


class FetchFailureView(BaseModel):
    ticker: str
    error_type: str
    message: str


class DashboardStatusResponse(BaseModel):
    api_key_configured: bool
    enabled_tickers: list[str]
    fetch_delay_ms: int
    history_start: str
    history_end: str
    fetched_at: datetime | None = None
    cache_age_seconds: float | None = None
    cached_tickers: list[str] = []
    failures: list[FetchFailureView] = []
    cancelled: bool = False


class RefreshResponse(BaseModel):
    fetched_at: datetime
    tickers: list[str]
    failures: list[FetchFailureView]


class TickerCardDetail(BaseModel):
    card: TickerCard
    aggregates: list[DailyBar]
