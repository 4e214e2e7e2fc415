from mag7.schemas.dashboard import (
    ChartMode,
    ChartResponse,
    DashboardResponse,
    DashboardStatusResponse,
    MarketStats,
    Performer,
    TickerCard,
    TickerCardDetail,
)
from mag7.schemas.market import DailyBar, TickerResult, TickerSummary

__all__ = [
    "ChartMode",
    "ChartResponse",
    "DailyBar",
    "DashboardResponse",
    "DashboardStatusResponse",
    "MarketStats",
    "Performer",
    "TickerCard",
    "TickerCardDetail",
    "TickerResult",
    "TickerSummary",
]
