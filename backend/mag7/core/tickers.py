from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TickerInfo:
    ticker: str
    name: str
    color: str


MAG7_UNIVERSE: tuple[TickerInfo, ...] = (
    TickerInfo("AAPL", "Apple", "hsl(173, 58%, 39%)"),
    TickerInfo("MSFT", "Microsoft", "hsl(12, 76%, 61%)"),
    TickerInfo("GOOGL", "Alphabet", "hsl(197, 37%, 24%)"),
    TickerInfo("AMZN", "Amazon", "hsl(43, 74%, 66%)"),
    TickerInfo("META", "Meta", "hsl(27, 87%, 67%)"),
    TickerInfo("NVDA", "NVIDIA", "hsl(142, 71%, 45%)"),
    TickerInfo("TSLA", "Tesla", "hsl(0, 72%, 51%)"),
)

_BY_TICKER: dict[str, TickerInfo] = {info.ticker: info for info in MAG7_UNIVERSE}

_FALLBACK_COLOR = "hsl(24, 6%, 63%)"


def normalize_ticker(symbol: str) -> str:
    return str(symbol or "").strip().upper()


def ticker_info(symbol: str) -> TickerInfo:
    """Display metadata for *symbol*; symbols outside the universe get a neutral entry."""
    ticker = normalize_ticker(symbol)
    info = _BY_TICKER.get(ticker)
    if info is not None:
        return info
    return TickerInfo(ticker, ticker, _FALLBACK_COLOR)


def universe_view(enabled: list[str]) -> list[dict]:
    enabled_set = {normalize_ticker(t) for t in enabled}
    rows = [
        {"ticker": info.ticker, "name": info.name, "color": info.color, "enabled": info.ticker in enabled_set}
        for info in MAG7_UNIVERSE
    ]
    # Enabled symbols outside the universe are still listed.
    for ticker in enabled:
        ticker = normalize_ticker(ticker)
        if ticker and ticker not in _BY_TICKER:
            info = ticker_info(ticker)
            rows.append({"ticker": info.ticker, "name": info.name, "color": info.color, "enabled": True})
    return rows
