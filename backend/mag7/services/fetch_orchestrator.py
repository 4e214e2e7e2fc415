"""Sequential, rate-limited fetching of ticker results.

The upstream free tier allows five requests per minute, so tickers are fetched
one at a time with a fixed wait between successful requests.  Each ticker is
an independent unit: its failure is recorded and the run moves on.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Protocol

from mag7.core.tickers import normalize_ticker
from mag7.schemas.market import TickerResult
from mag7.services.market_client import MarketDataError

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AWAITING_SLOT = "awaiting_slot"
    DONE = "done"
    CANCELLED = "cancelled"


class Sleeper(Protocol):
    def sleep(self, seconds: float, cancel: threading.Event) -> None: ...


class EventSleeper:
    """Real-time wait that returns early once *cancel* is set."""

    def sleep(self, seconds: float, cancel: threading.Event) -> None:
        cancel.wait(timeout=seconds)


@dataclass(frozen=True)
class TickerOutcome:
    ticker: str
    result: TickerResult | None = None
    error_type: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass
class FetchReport:
    outcomes: list[TickerOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def results(self) -> list[TickerResult]:
        return [o.result for o in self.outcomes if o.result is not None]

    @property
    def failures(self) -> list[TickerOutcome]:
        return [o for o in self.outcomes if not o.ok]


class FetchOrchestrator:
    def __init__(
        self,
        fetch: Callable[[str], TickerResult],
        delay_ms: int = 15000,
        sleeper: Sleeper | None = None,
    ) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._fetch = fetch
        self._delay_seconds = delay_ms / 1000.0
        self._sleeper = sleeper or EventSleeper()
        self.state = FetchState.IDLE

    def _attempt(self, ticker: str, position: int, total: int) -> TickerOutcome:
        logger.info("Fetching %s (%d/%d)...", ticker, position, total)
        try:
            result = self._fetch(ticker)
        except MarketDataError as exc:
            logger.warning("Failed to fetch %s: %s", ticker, exc)
            return TickerOutcome(ticker=ticker, error_type=type(exc).__name__, error=str(exc))
        logger.info("Successfully fetched %s", ticker)
        return TickerOutcome(ticker=ticker, result=result)

    def run(self, tickers: Iterable[str], cancel: threading.Event | None = None) -> FetchReport:
        symbols = [normalize_ticker(t) for t in tickers]
        cancel = cancel or threading.Event()
        report = FetchReport()
        total = len(symbols)

        for index, ticker in enumerate(symbols):
            if cancel.is_set():
                break
            self.state = FetchState.FETCHING
            outcome = self._attempt(ticker, index + 1, total)
            report.outcomes.append(outcome)

            if outcome.ok and index < total - 1 and self._delay_seconds > 0:
                self.state = FetchState.AWAITING_SLOT
                logger.info("Waiting %.0f seconds before next request...", self._delay_seconds)
                self._sleeper.sleep(self._delay_seconds, cancel)

        if cancel.is_set() and len(report.outcomes) < total:
            self.state = FetchState.CANCELLED
            report.cancelled = True
            logger.info("Fetch cancelled after %d/%d tickers", len(report.outcomes), total)
        else:
            self.state = FetchState.DONE
            logger.info(
                "Fetch finished: %d succeeded, %d failed",
                len(report.results),
                len(report.failures),
            )
        return report

    def fetch_all(self, tickers: Iterable[str], cancel: threading.Event | None = None) -> list[TickerResult]:
        return self.run(tickers, cancel=cancel).results
