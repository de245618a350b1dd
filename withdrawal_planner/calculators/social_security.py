"""Taxation of Social Security benefits.

Up to 85% of Social Security benefits can be taxable.  The taxable share is
driven by *provisional income*: other income (including pre-tax withdrawals,
interest and dividends) plus half of the benefits.  Two thresholds apply per
filing status (25 000 / 34 000 for single and head of household filers,
32 000 / 44 000 for married couples filing jointly):

* Below the base threshold nothing is taxable.
* Between the thresholds, up to 50% of benefits are taxable, at 50 cents per
  dollar over the base threshold.
* Above the upper threshold, 85 cents per dollar over the upper threshold is
  added to the amount from the middle tier, capped at 85% of benefits.

Example
-------

>>> pi = provisional_income(30000, 0, 0, 0, 20000)
>>> pi
40000.0
>>> taxable_social_security(20000, pi, 25000, 34000)
9600.0
"""

from __future__ import annotations


def provisional_income(
    pre_tax_withdrawal: float,
    other_income: float,
    interest_income: float,
    qualified_dividends: float,
    ss_income: float,
) -> float:
    return float(
        pre_tax_withdrawal + other_income + interest_income + qualified_dividends + 0.5 * ss_income
    )


def taxable_social_security(
    ss_income: float,
    provisional: float,
    base_threshold: float,
    upper_threshold: float,
) -> float:
    """Return the taxable portion of gross Social Security income.

    Parameters
    ----------
    ss_income : float
        Gross annual benefits.
    provisional : float
        Provisional income from :func:`provisional_income`.
    base_threshold, upper_threshold : float
        The two filing-status thresholds.

    Returns
    -------
    float
        Taxable benefits, never more than 85% of ``ss_income``.
    """
    if ss_income <= 0:
        return 0.0
    if provisional > upper_threshold:
        taxable = min(
            0.85 * ss_income,
            0.85 * (provisional - upper_threshold)
            + 0.5 * min(provisional - base_threshold, upper_threshold - base_threshold),
        )
    elif provisional > base_threshold:
        taxable = min(0.5 * ss_income, 0.5 * (provisional - base_threshold))
    else:
        taxable = 0.0
    return min(taxable, 0.85 * ss_income)


__all__ = ["provisional_income", "taxable_social_security"]
