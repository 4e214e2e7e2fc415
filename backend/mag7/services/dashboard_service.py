from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Protocol

from mag7.core.config import MarketDataConfig, Settings, get_settings
from mag7.core.tickers import normalize_ticker
from mag7.quant import build_chart_series, build_ticker_card, compute_stats
from mag7.schemas.dashboard import (
    ChartMode,
    ChartResponse,
    DashboardResponse,
    DashboardStatusResponse,
    FetchFailureView,
    MarketStats,
    RefreshResponse,
    TickerCardDetail,
)
from mag7.schemas.market import TickerResult
from mag7.services.fetch_orchestrator import FetchOrchestrator, FetchReport, Sleeper
from mag7.services.market_client import MarketDataClient

logger = logging.getLogger(__name__)


class NoDataAvailableError(RuntimeError):
    pass


class TickerFetcher(Protocol):
    def fetch_ticker_result(self, ticker: str) -> TickerResult: ...


@dataclass(frozen=True)
class _Snapshot:
    fetched_at: datetime
    loaded_at: float
    report: FetchReport


def _chart_response(results: list[TickerResult], mode: ChartMode) -> ChartResponse:
    return ChartResponse(
        mode=mode,
        tickers=[r.ticker for r in results],
        points=build_chart_series(results, mode),
    )


def _ticker_detail(result: TickerResult) -> TickerCardDetail:
    return TickerCardDetail(card=build_ticker_card(result), aggregates=result.aggregates)


def _failure_views(report: FetchReport) -> list[FetchFailureView]:
    return [
        FetchFailureView(ticker=o.ticker, error_type=o.error_type or "", message=o.error or "")
        for o in report.failures
    ]


class DashboardService:
    """Owns the cached fetch result and turns it into dashboard payloads."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[MarketDataConfig], TickerFetcher] | None = None,
        sleeper: Sleeper | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory or MarketDataClient
        self._sleeper = sleeper
        self._clock = clock
        self._lock = threading.Lock()
        self._in_flight: threading.Event | None = None
        self._snapshot: _Snapshot | None = None

    def _is_fresh(self, snapshot: _Snapshot | None) -> bool:
        if snapshot is None:
            return False
        # A cancelled run is partial and never counts as fresh.
        if snapshot.report.cancelled:
            return False
        return self._clock() - snapshot.loaded_at <= self.settings.cache_ttl_seconds

    def _fetch(self, config: MarketDataConfig) -> _Snapshot:
        client = self._client_factory(config)
        orchestrator = FetchOrchestrator(
            client.fetch_ticker_result,
            delay_ms=self.settings.fetch_delay_ms,
            sleeper=self._sleeper,
        )
        tickers = self.settings.tickers_list
        logger.info("Loading dashboard data for %s", ", ".join(tickers) or "<none>")
        cancel = threading.Event()
        self._in_flight = cancel
        try:
            report = orchestrator.run(tickers, cancel=cancel)
        finally:
            self._in_flight = None
        return _Snapshot(fetched_at=datetime.now(timezone.utc), loaded_at=self._clock(), report=report)

    def snapshot(self, force_refresh: bool = False) -> _Snapshot:
        config = self.settings.market_data_config()
        # Held for the whole fetch so only one request sequence is ever in flight.
        with self._lock:
            if force_refresh or not self._is_fresh(self._snapshot):
                self._snapshot = self._fetch(config)
            return self._snapshot

    def load(self, force_refresh: bool = False) -> list[TickerResult]:
        results = self.snapshot(force_refresh=force_refresh).report.results
        if not results:
            raise NoDataAvailableError("No market data available for any configured ticker")
        return results

    def refresh(self) -> RefreshResponse:
        snapshot = self.snapshot(force_refresh=True)
        return RefreshResponse(
            fetched_at=snapshot.fetched_at,
            tickers=[r.ticker for r in snapshot.report.results],
            failures=_failure_views(snapshot.report),
        )

    def cancel(self) -> None:
        """Abandon the fetch sequence in flight, if any; later loads fetch again."""
        cancel = self._in_flight
        if cancel is not None:
            cancel.set()

    def ticker(self, symbol: str) -> TickerCardDetail:
        """One ticker: served from a fresh cached fetch, else fetched on its own."""
        ticker = normalize_ticker(symbol)
        config = self.settings.market_data_config()
        with self._lock:
            snapshot = self._snapshot
            if self._is_fresh(snapshot):
                for result in snapshot.report.results:
                    if result.ticker == ticker:
                        return _ticker_detail(result)
            logger.info("Fetching %s on its own", ticker)
            result = self._client_factory(config).fetch_ticker_result(ticker)
        return _ticker_detail(result)

    def chart(self, mode: ChartMode = "raw") -> ChartResponse:
        return _chart_response(self.load(), mode)

    def stats(self) -> MarketStats:
        return compute_stats(self.load())

    def dashboard(self, mode: ChartMode = "raw") -> DashboardResponse:
        snapshot = self.snapshot()
        results = snapshot.report.results
        if not results:
            raise NoDataAvailableError("No market data available for any configured ticker")
        return DashboardResponse(
            fetched_at=snapshot.fetched_at,
            tickers=[r.ticker for r in results],
            cards=[build_ticker_card(r) for r in results],
            stats=compute_stats(results),
            chart=_chart_response(results, mode),
        )

    def status(self) -> DashboardStatusResponse:
        settings = self.settings
        snapshot = self._snapshot
        payload = DashboardStatusResponse(
            api_key_configured=settings.api_key_configured,
            enabled_tickers=settings.tickers_list,
            fetch_delay_ms=settings.fetch_delay_ms,
            history_start=settings.history_start_date.isoformat(),
            history_end=settings.history_end_date.isoformat(),
        )
        if snapshot is None:
            return payload
        return payload.model_copy(
            update={
                "fetched_at": snapshot.fetched_at,
                "cache_age_seconds": round(self._clock() - snapshot.loaded_at, 3),
                "cached_tickers": [r.ticker for r in snapshot.report.results],
                "failures": _failure_views(snapshot.report),
                "cancelled": snapshot.report.cancelled,
            }
        )


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    return DashboardService(get_settings())
