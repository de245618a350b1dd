"""Tax calculation utilities.

This module implements the simplified U.S. federal and state tax rules used to
price a retirement withdrawal.  Ordinary income is taxed through progressive
brackets.  Long-term capital gains and qualified dividends are stacked on top
of ordinary taxable income, so gains first fill whatever is left of the 0%
capital-gains band.  The Net Investment Income Tax and a flat state income tax
complete the picture.  Less common provisions (AMT, credits, itemised
deductions) are omitted.

Bracket schedules come from :mod:`.tax_schedule`; every function here is a pure
function of its arguments.

Example
-------

>>> from withdrawal_planner.calculators.tax_schedule import base_brackets
>>> round(compute_federal_tax(30000, base_brackets("single")), 2)
3352.0
"""

from __future__ import annotations

from typing import Sequence

from .tax_schedule import TaxBracket

NIIT_RATE = 0.038


def compute_federal_tax(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Compute federal income tax on ordinary taxable income.

    ``taxable_income`` is income after the standard deduction.  Each bracket
    taxes the slice of income that falls inside it, in ascending order.
    """
    if taxable_income <= 0:
        return 0.0
    tax = 0.0
    remaining = taxable_income
    for bracket in brackets:
        amount = min(remaining, bracket.width)
        if amount <= 0:
            break
        tax += amount * bracket.rate
        remaining -= amount
    return tax


def compute_capital_gains_tax(
    capital_gains: float,
    ordinary_taxable_income: float,
    cap_gains_brackets: Sequence[TaxBracket],
) -> float:
    """Compute long-term capital gains tax with gains stacked on ordinary income.

    Parameters
    ----------
    capital_gains : float
        Realized long-term gains plus qualified dividends.
    ordinary_taxable_income : float
        Ordinary taxable income; it occupies the bottom of the schedule.
    cap_gains_brackets : sequence of TaxBracket
        Capital-gains schedule in ascending order.

    Returns
    -------
    float
        Tax due on the gains alone.
    """
    if capital_gains <= 0:
        return 0.0
    tax = 0.0
    gains_remaining = capital_gains
    income_level = ordinary_taxable_income
    for bracket in cap_gains_brackets:
        if gains_remaining <= 0:
            break
        room = max(0.0, bracket.upper - income_level)
        if room > 0:
            in_bracket = min(gains_remaining, room)
            tax += in_bracket * bracket.rate
            gains_remaining -= in_bracket
            income_level += in_bracket
    return tax


def net_investment_income_tax(
    net_investment_income: float,
    modified_income: float,
    threshold: float,
) -> float:
    """3.8% surtax on the lesser of investment income and income over ``threshold``."""
    over_threshold = max(0.0, modified_income - threshold)
    return NIIT_RATE * max(0.0, min(net_investment_income, over_threshold))


def compute_state_tax(taxable_income: float, rate: float) -> float:
    """Flat state income tax."""
    return max(0.0, taxable_income) * rate


__all__ = [
    "NIIT_RATE",
    "compute_federal_tax",
    "compute_capital_gains_tax",
    "net_investment_income_tax",
    "compute_state_tax",
]
