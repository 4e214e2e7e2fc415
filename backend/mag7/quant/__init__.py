"""Dashboard transforms -- pure computation, no I/O."""

from ._helpers import percent_change
from .cards import build_ticker_card
from .chart import CHART_MODES, build_chart_series
from .stats import EmptyInputError, compute_stats

__all__ = [
    # chart
    "CHART_MODES",
    "build_chart_series",
    # stats
    "EmptyInputError",
    "compute_stats",
    "percent_change",
    # cards
    "build_ticker_card",
]
