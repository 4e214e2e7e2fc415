"""Shared helpers for the quant package."""

from __future__ import annotations

import math


def _safe_float(value: object) -> float | None:
    """Convert *value* to a Python float, returning ``None`` for nan / inf / bad types."""
    if value is None:
        return None
    try:
        f = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def percent_change(open_: float, close: float) -> float | None:
    """``100 * (close - open) / open``, or ``None`` when open is zero."""
    if open_ == 0:
        return None
    return _safe_float(100 * (close - open_) / open_)
