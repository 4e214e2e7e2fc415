from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

import httpx
from pydantic import ValidationError

from mag7.core.config import MarketDataConfig
from mag7.core.tickers import normalize_ticker
from mag7.schemas.market import AggregatesResponse, DailyBar, TickerResult, TickerSummary

logger = logging.getLogger(__name__)

Timespan = Literal["day", "week", "month"]

# The free tier serves end-of-day data with status DELAYED; the payload is the same.
_OK_STATUSES = {"OK", "DELAYED"}


class MarketDataError(RuntimeError):
    pass


class UpstreamHttpError(MarketDataError):
    def __init__(self, ticker: str, status: int, detail: str = "") -> None:
        self.ticker = ticker
        self.status = status
        message = f"Market data request for {ticker} failed with HTTP {status}"
        if detail:
            message = f"{message}: {detail[:300]}"
        super().__init__(message)


class UpstreamRequestError(MarketDataError):
    def __init__(self, ticker: str, reason: str) -> None:
        self.ticker = ticker
        super().__init__(f"Market data request for {ticker} failed: {reason}")


class NoDataError(MarketDataError):
    def __init__(self, ticker: str, start: date | None = None, end: date | None = None) -> None:
        self.ticker = ticker
        self.start = start
        self.end = end
        if start is not None and end is not None:
            message = f"No aggregate data available for {ticker}. Check date range: {start} to {end}"
        else:
            message = f"No previous day data available for {ticker}"
        super().__init__(message)


class EmptySeriesError(MarketDataError):
    def __init__(self, ticker: str) -> None:
        self.ticker = ticker
        super().__init__(f"Cannot derive a summary for {ticker} from an empty series")


def _redact(url: str, api_key: str) -> str:
    return url.replace(api_key, "***") if api_key else url


def derive_summary(ticker: str, series: list[DailyBar]) -> TickerSummary:
    """Treat the most recent bar of *series* as the previous-day snapshot."""
    if not series:
        raise EmptySeriesError(ticker)
    last = series[-1]
    return TickerSummary(
        ticker=normalize_ticker(ticker),
        close=last.close,
        high=last.high,
        low=last.low,
        open=last.open,
        volume=last.volume,
        vwap=last.vwap,
        timestamp=last.timestamp,
        transactions=last.transactions,
    )


@dataclass
class MarketDataClient:
    config: MarketDataConfig
    transport: httpx.BaseTransport | None = None

    def _get(self, ticker: str, path: str, params: dict[str, Any]) -> httpx.Response:
        url = f"{self.config.base_url}{path}"
        query = {**params, "apiKey": self.config.api_key}
        try:
            with httpx.Client(timeout=self.config.timeout_seconds, transport=self.transport) as client:
                response = client.get(url, params=query)
        except httpx.RequestError as exc:
            raise UpstreamRequestError(ticker, _redact(str(exc), self.config.api_key)) from exc

        logger.debug("GET %s -> %s", _redact(str(response.url), self.config.api_key), response.status_code)
        if not response.is_success:
            raise UpstreamHttpError(ticker, response.status_code, response.text)
        return response

    def _parse(self, response: httpx.Response, ticker: str, start: date | None, end: date | None) -> list[DailyBar]:
        try:
            payload = AggregatesResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise NoDataError(ticker, start, end) from exc

        logger.info(
            "API response for %s: status=%s resultsCount=%s from=%s to=%s",
            ticker,
            payload.status,
            payload.resultsCount,
            start,
            end,
        )
        if payload.status not in _OK_STATUSES or not payload.results:
            raise NoDataError(ticker, start, end)
        return list(payload.results)

    def fetch_series(
        self,
        ticker: str,
        start: date,
        end: date,
        *,
        multiplier: int = 1,
        timespan: Timespan = "day",
    ) -> list[DailyBar]:
        symbol = normalize_ticker(ticker)
        path = f"/v2/aggs/ticker/{symbol}/range/{multiplier}/{timespan}/{start.isoformat()}/{end.isoformat()}"
        response = self._get(symbol, path, {"adjusted": "true", "sort": "asc"})
        return self._parse(response, symbol, start, end)

    def fetch_previous_close(self, ticker: str) -> TickerSummary:
        """Previous-close record straight from the exchange feed (costs one request)."""
        symbol = normalize_ticker(ticker)
        response = self._get(symbol, f"/v2/aggs/ticker/{symbol}/prev", {"adjusted": "true"})
        bars = self._parse(response, symbol, None, None)
        return derive_summary(symbol, bars[:1])

    def fetch_ticker_result(self, ticker: str) -> TickerResult:
        # Previous day comes from the last bar: one request per ticker.
        symbol = normalize_ticker(ticker)
        aggregates = self.fetch_series(symbol, self.config.history_start, self.config.history_end)
        return TickerResult(
            ticker=symbol,
            previous_day=derive_summary(symbol, aggregates),
            aggregates=aggregates,
        )
