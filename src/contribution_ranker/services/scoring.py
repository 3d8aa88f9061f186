"""Shared numeric helpers for the scoring formulas."""

from __future__ import annotations

import math

from contribution_ranker.domain.entities import Tier

TIER_LOW_BOUND = 0.4
TIER_HIGH_BOUND = 0.7

# Scores are rounded to this many places before tiering, so a weighted sum
# that is exactly 0.4 or 0.7 on paper stays Medium despite float error.
_TIER_PRECISION = 9


def clamp(value: float, low: float, high: float) -> float:
    """Pin *value* into ``[low, high]``; NaN collapses to *low*."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def ratio(value: float, ceiling: float) -> float:
    """``value / ceiling`` pinned to [0, 1]."""
    if ceiling <= 0:
        return 0.0
    return clamp(value / ceiling, 0.0, 1.0)


def tier_for(score: float) -> Tier:
    """High above 0.7, Low below 0.4, Medium on [0.4, 0.7] inclusive."""
    score = round(score, _TIER_PRECISION)
    if score > TIER_HIGH_BOUND:
        return Tier.HIGH
    if score < TIER_LOW_BOUND:
        return Tier.LOW
    return Tier.MEDIUM
