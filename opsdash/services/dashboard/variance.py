"""
Dashboard Variance — Period-over-period percentage change.

A zero previous reading cannot be divided by. The dashboard treats a metric
that appeared from nothing as a 100% increase and one that stayed at zero as
no change.
"""

from __future__ import annotations

import math

from opsdash.models.dashboard import Variation


def _round_half_up(value: float) -> float:
    """One decimal, halves rounded up."""
    return math.floor(value * 10 + 0.5) / 10


def calculate_variation(current: float, previous: float) -> Variation:
    """Percentage change from ``previous`` to ``current``.

    ``percentage`` is always >= 0; direction lives in ``is_increase``, which is
    strictly ``current > previous`` so equal readings are never an increase.
    """
    if previous == 0:
        return Variation(
            percentage=100.0 if current > 0 else 0.0,
            is_increase=current > 0,
        )

    delta = current - previous
    return Variation(
        percentage=_round_half_up(abs(delta / previous * 100)),
        is_increase=delta > 0,
    )


def variation_or_none(current: float, previous: float | None) -> Variation | None:
    """Variation, or None when there is no prior reading to compare with."""
    if previous is None:
        return None
    return calculate_variation(current, previous)
