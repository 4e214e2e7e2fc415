"""Align per-ticker bar series onto one timeline for the comparison chart."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from mag7.schemas.dashboard import ChartMode
from mag7.schemas.market import TickerResult

from ._helpers import _safe_float

CHART_MODES: tuple[str, ...] = ("raw", "indexed")


def _series_frame(results: Iterable[TickerResult]) -> pd.DataFrame:
    rows = [
        {"ticker": item.ticker, "date": int(bar.timestamp), "close": float(bar.close)}
        for item in results
        for bar in item.aggregates
    ]
    if not rows:
        return pd.DataFrame(columns=["ticker", "date", "close"])
    frame = pd.DataFrame(rows)
    # Stable sort: a duplicated timestamp within one series keeps its first bar.
    frame = frame.sort_values("date", kind="mergesort")
    return frame.drop_duplicates(subset=["ticker", "date"], keep="first")


def build_chart_series(results: Iterable[TickerResult], mode: ChartMode = "raw") -> list[dict]:
    """Return ``[{date, <ticker>: value, ...}, ...]`` over the union of all timestamps.

    ``raw`` uses close prices.  ``indexed`` rebases each ticker so that its
    own first bar reads 100.  A ticker without a bar at some timestamp is left
    out of that point; a ticker whose base close is zero has no indexed values.
    """
    if mode not in CHART_MODES:
        raise ValueError(f"Unknown chart mode {mode!r}; expected one of {CHART_MODES}")

    results = list(results)
    frame = _series_frame(results)
    if frame.empty:
        return []

    if mode == "indexed":
        base = frame.groupby("ticker", sort=False)["close"].transform("first")
        frame = frame.assign(value=frame["close"] / base.where(base != 0) * 100)
    else:
        frame = frame.assign(value=frame["close"])

    order = list(dict.fromkeys(item.ticker for item in results))
    wide = frame.pivot(index="date", columns="ticker", values="value").sort_index()
    wide = wide.reindex(columns=[t for t in order if t in wide.columns])

    points: list[dict] = []
    for ts, row in wide.iterrows():
        point: dict = {"date": int(ts)}
        for ticker, value in row.items():
            safe = _safe_float(value)
            if safe is not None:
                point[ticker] = safe
        points.append(point)
    return points
