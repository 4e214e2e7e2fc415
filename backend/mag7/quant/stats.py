"""Market-overview statistics over previous-day summaries.  Pure computation, no I/O."""

from __future__ import annotations

from typing import Iterable

from mag7.schemas.dashboard import MarketStats, Performer
from mag7.schemas.market import TickerResult

from ._helpers import percent_change


class EmptyInputError(ValueError):
    pass


def compute_stats(results: Iterable[TickerResult]) -> MarketStats:
    """Best/worst mover, mean move and gainer/loser/unchanged counts.

    Tickers whose open is zero have no defined move; they are reported in
    ``excluded`` and left out of every other figure.
    """
    changes: list[Performer] = []
    excluded: list[str] = []
    for item in results:
        change = percent_change(item.previous_day.open, item.previous_day.close)
        if change is None:
            excluded.append(item.ticker)
            continue
        changes.append(Performer(ticker=item.ticker, change_percent=change))

    if not changes:
        if excluded:
            raise EmptyInputError(f"No ticker has a defined percentage change: {', '.join(excluded)}")
        raise EmptyInputError("Cannot compute market statistics without any ticker data")

    # Strict comparisons keep the first-encountered ticker on ties.
    best = changes[0]
    worst = changes[0]
    for current in changes[1:]:
        if current.change_percent > best.change_percent:
            best = current
        if current.change_percent < worst.change_percent:
            worst = current

    values = [c.change_percent for c in changes]
    return MarketStats(
        best_performer=best,
        worst_performer=worst,
        average_move_percent=sum(values) / len(values),
        gainers=sum(1 for v in values if v > 0),
        losers=sum(1 for v in values if v < 0),
        unchanged=sum(1 for v in values if v == 0),
        excluded=excluded,
    )
