"""Inflation helpers for spending targets.

Retiree spending tends to follow a "smile": it keeps pace with inflation early
on, then grows more slowly through the middle years of retirement.
:func:`inflate_spending_smile` models this with three phases; from
``phase2_year`` the annual growth is ``base_inflation - phase2_reduction`` and
from ``phase3_year`` it is ``base_inflation - phase3_reduction``.
"""

from __future__ import annotations


def inflate_value(base: float, rate: float, years: int) -> float:
    return base * (1 + rate) ** years


def inflate_spending_smile(
    base: float,
    base_inflation: float,
    current_year: int,
    calendar_year: int,
    phase2_year: int,
    phase2_reduction: float,
    phase3_year: int,
    phase3_reduction: float,
) -> float:
    """Grow ``base`` spending from ``current_year`` to ``calendar_year``.

    Each year after ``current_year`` up to and including ``calendar_year``
    applies that year's phase rate.  A ``calendar_year`` at or before
    ``current_year`` returns ``base`` unchanged.
    """
    spending = base
    for year in range(current_year + 1, calendar_year + 1):
        rate = base_inflation
        if year >= phase3_year:
            rate = base_inflation - phase3_reduction
        elif year >= phase2_year:
            rate = base_inflation - phase2_reduction
        spending *= 1 + rate
    return spending


__all__ = ["inflate_value", "inflate_spending_smile"]
