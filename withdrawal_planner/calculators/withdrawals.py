"""Withdrawal waterfall and single-year tax pricing.

Given a gross amount to withdraw, :func:`allocate_withdrawal` decides which
accounts fund it and prices the result.  Sources are tapped in a fixed order,
each step only covering what the earlier steps left uncovered:

1. Required minimum distributions come out of pre-tax accounts first, even
   when they exceed the requested amount.
2. Extra pre-tax dollars fill whatever room is left in the 12% bracket.
3. The taxable brokerage account.
4. Any remaining pre-tax balance.
5. Roth, strictly as the source of last resort.

The tax on the resulting mix covers ordinary federal tax, stacked capital
gains tax, NIIT and a flat state tax, with Social Security taxability driven by
provisional income.  Nothing here raises on odd numeric input: a zero or
negative request simply yields zero withdrawals and zero tax.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from . import social_security as ss_calc
from . import taxes as tax_calc
from .tax_schedule import TaxContext

EXCESS_RMD_REPORTING_FLOOR = 100.0


@dataclass(frozen=True)
class AccountPool:
    """Balances available for one year's withdrawal."""

    pre_tax: float = 0.0
    roth: float = 0.0
    taxable: float = 0.0
    taxable_basis: float = 0.0

    @property
    def gain_ratio(self) -> float:
        """Share of a taxable withdrawal that is a realized gain."""
        if self.taxable <= 0:
            return 0.0
        return max(0.0, (self.taxable - self.taxable_basis) / self.taxable)


@dataclass(frozen=True)
class InvestmentIncome:
    """Non-withdrawal income for the year."""

    qualified_dividends: float = 0.0
    interest: float = 0.0
    other_income: float = 0.0
    social_security: float = 0.0


@dataclass(frozen=True)
class WithdrawalResult:
    gross_withdrawal: float
    from_pre_tax: float
    from_taxable: float
    from_roth: float
    federal_ordinary_tax: float
    federal_cap_gains_tax: float
    niit_tax: float
    federal_tax: float
    state_tax: float
    total_tax: float
    after_tax: float
    taxable_ordinary_income: float
    realized_gains: float
    total_capital_gains: float
    taxable_social_security: float
    provisional_income: float
    excess_rmd_after_tax: float
    holder_rmds: Tuple[float, ...] = ()
    total_rmd: float = 0.0
    qualified_dividends: float = 0.0
    interest_income: float = 0.0
    other_income: float = 0.0


def _waterfall(
    gross_withdrawal: float,
    total_rmd: float,
    accounts: AccountPool,
    income: InvestmentIncome,
    context: TaxContext,
) -> Tuple[float, float, float]:
    from_pre_tax = max(0.0, min(total_rmd, accounts.pre_tax))
    from_taxable = 0.0
    from_roth = 0.0

    need = gross_withdrawal - from_pre_tax
    available_pre_tax = max(0.0, accounts.pre_tax - from_pre_tax)
    available_taxable = max(0.0, accounts.taxable)
    available_roth = max(0.0, accounts.roth)

    if need <= 0:
        return from_pre_tax, from_taxable, from_roth

    # fill the 12% bracket with pre-tax dollars; a schedule without one gets no room
    room = 0.0
    if context.top_of_12_bracket > 0:
        ordinary_so_far = from_pre_tax + income.interest + income.other_income
        room = max(0.0, context.top_of_12_bracket - (ordinary_so_far - context.standard_deduction))
    take = min(room, available_pre_tax, need)
    if take > 0:
        from_pre_tax += take
        available_pre_tax -= take
        need -= take

    if need > 0:
        take = min(need, available_taxable)
        from_taxable += take
        need -= take

    if need > 0:
        take = min(need, available_pre_tax)
        from_pre_tax += take
        need -= take

    if need > 0:
        from_roth = min(need, available_roth)

    return from_pre_tax, from_taxable, from_roth


def allocate_withdrawal(
    gross_withdrawal: float,
    holder_rmds: Sequence[float],
    accounts: AccountPool,
    income: InvestmentIncome,
    context: TaxContext,
    state_tax_rate: float = 0.0,
    gain_ratio: Optional[float] = None,
) -> WithdrawalResult:
    """Split ``gross_withdrawal`` across accounts and compute the tax owed.

    Parameters
    ----------
    gross_withdrawal : float
        Amount the household asks to withdraw before tax.
    holder_rmds : sequence of float
        Each account holder's RMD for the year; their sum is forced out of
        pre-tax balances.
    accounts : AccountPool
        Current balances and taxable cost basis.
    income : InvestmentIncome
        Dividends, interest, other ordinary income and gross Social Security.
    context : TaxContext
        Inflated tax parameters for the year and filing status.
    state_tax_rate : float, optional
        Flat state rate applied to ordinary taxable income plus gains.
    gain_ratio : float, optional
        Override for ``accounts.gain_ratio``.

    Returns
    -------
    WithdrawalResult
        Per-source amounts, every tax component and the after-tax amount.
    """
    rmds = tuple(float(r) for r in holder_rmds)
    total_rmd = sum(rmds)
    ratio = accounts.gain_ratio if gain_ratio is None else gain_ratio

    from_pre_tax, from_taxable, from_roth = _waterfall(
        gross_withdrawal, total_rmd, accounts, income, context
    )

    ss_income = income.social_security or 0.0
    provisional = 0.0
    taxable_ss = 0.0
    if ss_income > 0:
        provisional = ss_calc.provisional_income(
            from_pre_tax, income.other_income, income.interest, income.qualified_dividends, ss_income
        )
        taxable_ss = ss_calc.taxable_social_security(
            ss_income, provisional, context.ss_base_threshold, context.ss_upper_threshold
        )

    ordinary_income = from_pre_tax + income.interest + income.other_income + taxable_ss
    taxable_ordinary = max(0.0, ordinary_income - context.standard_deduction)
    realized_gains = from_taxable * ratio
    total_gains = realized_gains + income.qualified_dividends

    ordinary_tax = tax_calc.compute_federal_tax(taxable_ordinary, context.brackets)
    cap_gains_tax = tax_calc.compute_capital_gains_tax(
        total_gains, taxable_ordinary, context.cap_gains_brackets
    )
    niit = tax_calc.net_investment_income_tax(
        income.interest + income.qualified_dividends + realized_gains,
        ordinary_income + total_gains,
        context.niit_threshold,
    )
    federal_tax = ordinary_tax + cap_gains_tax + niit
    state_tax = tax_calc.compute_state_tax(taxable_ordinary + total_gains, state_tax_rate)
    total_tax = federal_tax + state_tax

    actual_gross = from_pre_tax + from_taxable + from_roth
    after_tax = actual_gross - total_tax

    excess_rmd = max(0.0, total_rmd - gross_withdrawal)
    excess_after_tax = 0.0
    if excess_rmd > 0 and actual_gross > 0:
        excess_after_tax = excess_rmd - excess_rmd / actual_gross * total_tax
    if excess_after_tax <= EXCESS_RMD_REPORTING_FLOOR:
        excess_after_tax = 0.0

    return WithdrawalResult(
        gross_withdrawal=actual_gross,
        from_pre_tax=from_pre_tax,
        from_taxable=from_taxable,
        from_roth=from_roth,
        federal_ordinary_tax=ordinary_tax,
        federal_cap_gains_tax=cap_gains_tax,
        niit_tax=niit,
        federal_tax=federal_tax,
        state_tax=state_tax,
        total_tax=total_tax,
        after_tax=after_tax,
        taxable_ordinary_income=taxable_ordinary,
        realized_gains=realized_gains,
        total_capital_gains=total_gains,
        taxable_social_security=taxable_ss,
        provisional_income=provisional,
        excess_rmd_after_tax=excess_after_tax,
        holder_rmds=rmds,
        total_rmd=total_rmd,
        qualified_dividends=income.qualified_dividends,
        interest_income=income.interest,
        other_income=income.other_income,
    )


__all__ = [
    "AccountPool",
    "InvestmentIncome",
    "WithdrawalResult",
    "allocate_withdrawal",
]
