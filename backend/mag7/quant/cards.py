from __future__ import annotations

from mag7.core.tickers import TickerInfo, ticker_info
from mag7.schemas.dashboard import TickerCard
from mag7.schemas.market import TickerResult

from ._helpers import percent_change


def build_ticker_card(result: TickerResult, info: TickerInfo | None = None) -> TickerCard:
    """Per-ticker card figures derived from the previous-day summary."""
    info = info or ticker_info(result.ticker)
    summary = result.previous_day
    change = summary.close - summary.open
    return TickerCard(
        ticker=result.ticker,
        name=info.name,
        color=info.color,
        previous_day=summary,
        change=change,
        change_percent=percent_change(summary.open, summary.close),
        is_positive=change >= 0,
        volume_millions=round(summary.volume / 1_000_000, 1),
    )
