"""Find the gross withdrawal that produces a target spendable amount.

:func:`optimize_withdrawal` inverts :func:`.withdrawals.allocate_withdrawal`
with a bisection search.  After-tax income never decreases as the gross
withdrawal grows (every marginal rate is below 100%), so halving the bracket
``[0, max(3 * target, 1)]`` closes in on the answer.  The search stops as soon
as the after-tax amount lands within $50 of the target, or after 20 halvings,
in which case the final midpoint is priced and returned as a best effort.
Callers that need exact convergence should compare ``after_tax`` themselves.

Example
-------

>>> holder = AccountHolder(age=65, pre_tax=1_000_000, roth=200_000)
>>> res = optimize_withdrawal(80_000, [holder], filing_status="single")
>>> abs(res.after_tax - 80_000) < 50
True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from . import rmd
from .tax_schedule import DEFAULT_TAX_YEAR, StatusLike, TaxContext, build_tax_context
from .withdrawals import AccountPool, InvestmentIncome, WithdrawalResult, allocate_withdrawal

logger = logging.getLogger(__name__)

DIVIDEND_YIELD = 0.01
BOND_YIELD = 0.04
MAX_ITERATIONS = 20
AFTER_TAX_TOLERANCE = 50.0


@dataclass(frozen=True)
class AccountHolder:
    """One spouse/owner: age plus the balances held in their name.

    When ``birth_year`` is given it decides the RMD start age and
    ``rmd_start_age`` is ignored.
    """

    age: int
    pre_tax: float = 0.0
    roth: float = 0.0
    rmd_start_age: int = rmd.DEFAULT_RMD_START_AGE
    birth_year: Optional[int] = None

    @property
    def start_age(self) -> int:
        if self.birth_year is not None:
            return rmd.rmd_start_age(self.birth_year)
        return self.rmd_start_age

    @property
    def rmd(self) -> float:
        return rmd.compute_rmd(self.pre_tax, self.age, self.start_age)


def investment_income(
    taxable: float,
    stock_allocation: float,
    other_income: float = 0.0,
    social_security: float = 0.0,
) -> InvestmentIncome:
    """Estimate the year's dividends and interest thrown off by the taxable account.

    Stocks yield 1% in qualified dividends and bonds 4% in interest.
    """
    bond_allocation = 1.0 - stock_allocation
    return InvestmentIncome(
        qualified_dividends=taxable * stock_allocation * DIVIDEND_YIELD,
        interest=taxable * bond_allocation * BOND_YIELD,
        other_income=other_income,
        social_security=social_security or 0.0,
    )


def optimize_withdrawal(
    target_after_tax: float,
    holders: Sequence[AccountHolder],
    taxable: float = 0.0,
    taxable_basis: float = 0.0,
    stock_allocation: float = 0.6,
    filing_status: StatusLike = "single",
    state_tax_rate: float = 0.0,
    base_inflation: float = 0.0,
    years_from_start: int = 0,
    other_income: float = 0.0,
    social_security_income: float = 0.0,
    context: Optional[TaxContext] = None,
    year: int = DEFAULT_TAX_YEAR,
    tax_tables: Optional[Mapping[str, Any]] = None,
) -> WithdrawalResult:
    """Solve for the withdrawal that leaves ``target_after_tax`` to spend.

    Parameters
    ----------
    target_after_tax : float
        Spendable amount wanted for the year (>= 0).
    holders : sequence of AccountHolder
        One or two account owners; each owner's RMD is computed separately.
    taxable, taxable_basis : float
        Brokerage balance and its cost basis.
    stock_allocation : float
        Stock share of the taxable account, used to estimate dividends/interest.
    filing_status : FilingStatus or str
        Ignored when ``context`` is supplied.
    state_tax_rate : float
        Flat state income tax rate.
    base_inflation, years_from_start : float, int
        Used to index the tax tables when ``context`` is not supplied.
    other_income, social_security_income : float
        Pensions/wages and gross Social Security for the year.
    context : TaxContext, optional
        Pre-computed year parameters.  Pass it when pricing many trials of the
        same year so the inflation scaling is not redone per call.

    Returns
    -------
    WithdrawalResult
        The allocation closest to the target, including each holder's RMD.
    """
    if context is None:
        context = build_tax_context(
            filing_status, base_inflation, years_from_start, year=year, tax_tables=tax_tables
        )

    holder_rmds = [h.rmd for h in holders]
    accounts = AccountPool(
        pre_tax=sum(h.pre_tax for h in holders),
        roth=sum(h.roth for h in holders),
        taxable=taxable,
        taxable_basis=taxable_basis,
    )
    income = investment_income(taxable, stock_allocation, other_income, social_security_income)

    def price(gross: float) -> WithdrawalResult:
        return allocate_withdrawal(gross, holder_rmds, accounts, income, context, state_tax_rate)

    if target_after_tax == 0:
        return price(0.0)

    low = 0.0
    high = max(target_after_tax * 3, 1.0)
    for iteration in range(MAX_ITERATIONS):
        mid = (low + high) / 2
        result = price(mid)
        if abs(result.after_tax - target_after_tax) < AFTER_TAX_TOLERANCE:
            logger.debug("withdrawal search converged after %d iterations", iteration + 1)
            return result
        if result.after_tax < target_after_tax:
            low = mid
        else:
            high = mid

    logger.debug(
        "withdrawal search hit %d iterations without reaching target %.2f",
        MAX_ITERATIONS,
        target_after_tax,
    )
    return price((low + high) / 2)


__all__ = [
    "AccountHolder",
    "investment_income",
    "optimize_withdrawal",
]
