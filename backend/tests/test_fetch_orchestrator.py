from pathlib import Path
import sys
import threading

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from mag7.schemas.market import DailyBar, TickerResult
from mag7.services.fetch_orchestrator import FetchOrchestrator, FetchState
from mag7.services.market_client import NoDataError, UpstreamHttpError, derive_summary


def _result(ticker: str) -> TickerResult:
    bars = [DailyBar(open=100, high=101, low=99, close=100.5, volume=1000, vwap=100.2, timestamp=1000)]
    return TickerResult(ticker=ticker, previous_day=derive_summary(ticker, bars), aggregates=bars)


class RecordingSleeper:
    def __init__(self, orchestrator_ref=None):
        self.calls: list[float] = []
        self.states: list[FetchState] = []
        self.orchestrator = orchestrator_ref

    def sleep(self, seconds, cancel):
        self.calls.append(seconds)
        if self.orchestrator is not None:
            self.states.append(self.orchestrator.state)


class FakeFetcher:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls: list[str] = []

    def __call__(self, ticker: str) -> TickerResult:
        self.calls.append(ticker)
        if ticker in self.failing:
            raise UpstreamHttpError(ticker, 429)
        return _result(ticker)


def test_failed_ticker_is_skipped_and_order_preserved():
    fetcher = FakeFetcher(failing={"B"})
    sleeper = RecordingSleeper()
    orchestrator = FetchOrchestrator(fetcher, delay_ms=15000, sleeper=sleeper)

    results = orchestrator.fetch_all(["A", "B", "C"])

    assert [r.ticker for r in results] == ["A", "C"]
    assert fetcher.calls == ["A", "B", "C"]
    assert orchestrator.state is FetchState.DONE


def test_waits_after_each_success_except_the_last():
    sleeper = RecordingSleeper()
    orchestrator = FetchOrchestrator(FakeFetcher(), delay_ms=15000, sleeper=sleeper)

    orchestrator.fetch_all(["AAPL", "MSFT", "TSLA"])

    assert sleeper.calls == [15.0, 15.0]


def test_no_wait_after_a_failure():
    sleeper = RecordingSleeper()
    orchestrator = FetchOrchestrator(FakeFetcher(failing={"A"}), delay_ms=2000, sleeper=sleeper)

    orchestrator.fetch_all(["A", "B", "C"])

    # Only B's success (not last) is followed by a wait.
    assert sleeper.calls == [2.0]


def test_single_ticker_never_waits():
    sleeper = RecordingSleeper()
    orchestrator = FetchOrchestrator(FakeFetcher(), delay_ms=15000, sleeper=sleeper)

    results = orchestrator.fetch_all(["TSLA"])

    assert [r.ticker for r in results] == ["TSLA"]
    assert sleeper.calls == []


def test_sleeper_runs_in_awaiting_slot_state():
    sleeper = RecordingSleeper()
    orchestrator = FetchOrchestrator(FakeFetcher(), delay_ms=10, sleeper=sleeper)
    sleeper.orchestrator = orchestrator

    orchestrator.fetch_all(["A", "B"])

    assert sleeper.states == [FetchState.AWAITING_SLOT]


def test_total_failure_returns_empty_result():
    orchestrator = FetchOrchestrator(FakeFetcher(failing={"A", "B"}), delay_ms=0, sleeper=RecordingSleeper())

    report = orchestrator.run(["A", "B"])

    assert report.results == []
    assert [f.ticker for f in report.failures] == ["A", "B"]
    assert report.failures[0].error_type == "UpstreamHttpError"
    assert "429" in report.failures[0].error
    assert report.cancelled is False


def test_report_tags_every_outcome():
    def fetch(ticker):
        if ticker == "META":
            raise NoDataError(ticker)
        return _result(ticker)

    report = FetchOrchestrator(fetch, delay_ms=0).run(["nvda", "META"])

    assert [(o.ticker, o.ok) for o in report.outcomes] == [("NVDA", True), ("META", False)]
    assert report.outcomes[1].error_type == "NoDataError"


def test_cancel_during_wait_stops_before_next_ticker():
    cancel = threading.Event()
    fetcher = FakeFetcher()

    class CancellingSleeper:
        def sleep(self, seconds, event):
            cancel.set()

    orchestrator = FetchOrchestrator(fetcher, delay_ms=15000, sleeper=CancellingSleeper())
    report = orchestrator.run(["A", "B", "C"], cancel=cancel)

    assert [r.ticker for r in report.results] == ["A"]
    assert fetcher.calls == ["A"]
    assert report.cancelled is True
    assert orchestrator.state is FetchState.CANCELLED


def test_cancel_before_start_fetches_nothing():
    cancel = threading.Event()
    cancel.set()
    fetcher = FakeFetcher()

    report = FetchOrchestrator(fetcher, delay_ms=0).run(["A"], cancel=cancel)

    assert report.results == []
    assert fetcher.calls == []
    assert report.cancelled is True


def test_default_sleeper_returns_early_on_cancel():
    cancel = threading.Event()
    fetcher = FakeFetcher()

    def fetch(ticker):
        result = fetcher(ticker)
        cancel.set()
        return result

    # A one-hour delay would hang the test if the wait ignored the cancel event.
    report = FetchOrchestrator(fetch, delay_ms=3_600_000).run(["A", "B"], cancel=cancel)

    assert [r.ticker for r in report.results] == ["A"]
    assert report.cancelled is True


def test_programming_errors_propagate():
    def fetch(ticker):
        raise KeyError("boom")

    with pytest.raises(KeyError):
        FetchOrchestrator(fetch, delay_ms=0).fetch_all(["A"])


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        FetchOrchestrator(FakeFetcher(), delay_ms=-1)
