"""Helper package that exposes the core withdrawal-planning calculators.

The `calculators` package contains small, focused modules that each implement
specific pieces of the retirement withdrawal logic:

* ``tax_schedule`` – base tax tables, filing status and inflation-indexed brackets.
* ``taxes`` – progressive federal tax, stacked capital gains tax, NIIT and state tax.
* ``social_security`` – provisional income and the taxable share of benefits.
* ``rmd`` – Required Minimum Distribution rules and Uniform Lifetime table.
* ``withdrawals`` – the account waterfall that prices a gross withdrawal.
* ``optimizer`` – bisection search for the withdrawal that hits an after-tax target.
* ``correlation`` – Cholesky factorisation and correlation matrix repair.
* ``monte_carlo`` – log-normal return draws, correlated shocks and percentiles.
* ``inflation`` – inflation of values and spending-smile schedules.

Each module exposes a few public functions with clear parameters and returns.  See
individual docstrings for details.
"""

from . import (  # noqa: F401
    tax_schedule,
    taxes,
    social_security,
    rmd,
    withdrawals,
    optimizer,
    correlation,
    monte_carlo,
    inflation,
)

__all__ = [
    "tax_schedule",
    "taxes",
    "social_security",
    "rmd",
    "withdrawals",
    "optimizer",
    "correlation",
    "monte_carlo",
    "inflation",
]
