import dataclasses

import numpy as np
import pytest

from withdrawal_planner.calculators.tax_schedule import build_tax_context
from withdrawal_planner.calculators.withdrawals import (
    AccountPool,
    InvestmentIncome,
    allocate_withdrawal,
)

SINGLE = build_tax_context("single", 0.03, 0)
MFJ = build_tax_context("married_joint", 0.03, 0)
NO_INCOME = InvestmentIncome()


def test_zero_withdrawal_without_rmd():
    accounts = AccountPool(pre_tax=500000, roth=200000, taxable=300000, taxable_basis=150000)
    res = allocate_withdrawal(0, [], accounts, NO_INCOME, SINGLE, 0.05)
    assert res.gross_withdrawal == 0
    assert res.from_pre_tax == 0
    assert res.from_taxable == 0
    assert res.from_roth == 0
    assert res.total_tax == 0
    assert res.after_tax == 0


def test_negative_request_behaves_like_zero():
    accounts = AccountPool(pre_tax=500000, roth=200000)
    res = allocate_withdrawal(-500, [0.0], accounts, NO_INCOME, SINGLE, 0.05)
    assert res.gross_withdrawal == 0
    assert res.total_tax == 0


def test_rmds_taken_first_from_pre_tax():
    accounts = AccountPool(pre_tax=500000, roth=200000, taxable=100000, taxable_basis=50000)
    income = InvestmentIncome(qualified_dividends=500, interest=2000)
    res = allocate_withdrawal(50000, [15000, 15000], accounts, income, MFJ, 0.05)
    assert res.total_rmd == pytest.approx(30000)
    assert res.holder_rmds == (15000.0, 15000.0)
    assert res.from_pre_tax >= 30000
    # the rest fits in the 12% bracket, so it also comes from pre-tax
    assert res.from_pre_tax == pytest.approx(50000)
    assert res.from_taxable == 0
    assert res.from_roth == 0


def test_rmd_forced_even_above_request():
    accounts = AccountPool(pre_tax=1000000)
    res = allocate_withdrawal(10000, [40000], accounts, NO_INCOME, SINGLE)
    assert res.gross_withdrawal == pytest.approx(40000)
    assert res.taxable_ordinary_income == pytest.approx(23900)
    assert res.total_tax == pytest.approx(2620)
    # 30k of surplus RMD, less its 75% share of the tax
    assert res.excess_rmd_after_tax == pytest.approx(28035)


def test_small_excess_rmd_is_suppressed():
    accounts = AccountPool(pre_tax=1000000)
    res = allocate_withdrawal(39950, [40000], accounts, NO_INCOME, SINGLE)
    assert res.excess_rmd_after_tax == 0.0


@pytest.mark.parametrize(
    "request_amount, expected",
    [
        (39900, 0.0),
        (39900.5, 0.0),
        (39899.99, pytest.approx(100.01)),
        (39800, pytest.approx(200.0)),
    ],
)
def test_excess_rmd_reporting_floor_boundary(request_amount, expected):
    # a deduction this large leaves the surplus untaxed, so it is reported as-is
    untaxed = dataclasses.replace(SINGLE, standard_deduction=1000000.0)
    res = allocate_withdrawal(request_amount, [40000], AccountPool(pre_tax=1000000), NO_INCOME, untaxed)
    assert res.total_tax == 0
    assert res.excess_rmd_after_tax == expected


def test_excess_rmd_just_below_floor_after_tax():
    # 107 of surplus keeps about 93.45% of itself after tax
    accounts = AccountPool(pre_tax=1000000)
    below = allocate_withdrawal(40000 - 107, [40000], accounts, NO_INCOME, SINGLE)
    above = allocate_withdrawal(40000 - 108, [40000], accounts, NO_INCOME, SINGLE)
    assert below.excess_rmd_after_tax == 0.0
    assert above.excess_rmd_after_tax == pytest.approx(108 * (1 - 2620 / 40000))


def test_twelve_percent_bracket_filled_before_taxable():
    accounts = AccountPool(pre_tax=500000, roth=100000, taxable=200000, taxable_basis=200000)
    res = allocate_withdrawal(100000, [], accounts, NO_INCOME, SINGLE)
    assert res.from_pre_tax == pytest.approx(66500)
    assert res.from_taxable == pytest.approx(33500)
    assert res.from_roth == 0
    assert res.taxable_ordinary_income == pytest.approx(SINGLE.top_of_12_bracket)
    assert res.federal_ordinary_tax == pytest.approx(5800)
    assert res.after_tax == pytest.approx(94200)


def test_no_bracket_room_when_top_of_12_is_zero():
    ctx = dataclasses.replace(SINGLE, top_of_12_bracket=0.0)
    accounts = AccountPool(pre_tax=500000, taxable=200000, taxable_basis=200000)
    res = allocate_withdrawal(50000, [], accounts, NO_INCOME, ctx)
    assert res.from_pre_tax == 0
    assert res.from_taxable == pytest.approx(50000)


def test_roth_is_used_last():
    accounts = AccountPool(pre_tax=100000, roth=500000, taxable=100000, taxable_basis=50000)
    res = allocate_withdrawal(800000, [], accounts, NO_INCOME, SINGLE, 0.05)
    assert res.from_pre_tax == pytest.approx(100000)
    assert res.from_taxable == pytest.approx(100000)
    assert res.from_roth == pytest.approx(500000)
    # balances cannot cover the request
    assert res.gross_withdrawal == pytest.approx(700000)


def test_roth_untouched_when_other_sources_cover_request():
    accounts = AccountPool(pre_tax=500000, roth=500000, taxable=100000, taxable_basis=50000)
    res = allocate_withdrawal(150000, [], accounts, NO_INCOME, SINGLE, 0.05)
    assert res.from_roth == 0
    assert res.from_pre_tax + res.from_taxable == pytest.approx(150000)


def test_taxable_withdrawal_realizes_proportional_gain():
    accounts = AccountPool(taxable=100000, taxable_basis=40000)
    assert accounts.gain_ratio == pytest.approx(0.6)
    res = allocate_withdrawal(50000, [], accounts, NO_INCOME, SINGLE, 0.05)
    assert res.from_taxable == pytest.approx(50000)
    assert res.realized_gains == pytest.approx(30000)
    assert res.total_capital_gains == pytest.approx(30000)
    # entirely inside the 0% capital gains band
    assert res.federal_cap_gains_tax == 0
    assert res.state_tax == pytest.approx(1500)


def test_gain_ratio_never_negative():
    assert AccountPool(taxable=100000, taxable_basis=150000).gain_ratio == 0.0
    assert AccountPool(taxable=0, taxable_basis=10).gain_ratio == 0.0


def test_social_security_taxable_portion():
    accounts = AccountPool(pre_tax=500000, roth=200000, taxable=100000, taxable_basis=50000)
    income = InvestmentIncome(qualified_dividends=500, interest=2000, other_income=10000, social_security=40000)
    res = allocate_withdrawal(100000, [50000], accounts, income, SINGLE, 0.05)
    assert res.from_pre_tax == pytest.approx(54500)
    assert res.from_taxable == pytest.approx(45500)
    assert res.provisional_income == pytest.approx(87000)
    assert 0 < res.taxable_social_security <= 40000 * 0.85
    assert res.taxable_social_security == pytest.approx(34000)


def test_state_tax_is_flat_on_taxable_income_and_gains():
    accounts = AccountPool(pre_tax=500000)
    res = allocate_withdrawal(50000, [], accounts, NO_INCOME, SINGLE, 0.05)
    expected = (res.taxable_ordinary_income + res.total_capital_gains) * 0.05
    assert res.state_tax == pytest.approx(expected)


def test_niit_applies_over_threshold():
    income = InvestmentIncome(qualified_dividends=10000, interest=20000, other_income=300000)
    res = allocate_withdrawal(0, [], AccountPool(), income, SINGLE)
    assert res.niit_tax == pytest.approx(0.038 * 30000)
    assert res.federal_tax == pytest.approx(res.federal_ordinary_tax + res.federal_cap_gains_tax + res.niit_tax)
    assert res.total_tax == pytest.approx(res.federal_tax + res.state_tax)


def test_after_tax_non_decreasing_in_gross():
    accounts = AccountPool(pre_tax=400000, roth=100000, taxable=200000, taxable_basis=80000)
    income = InvestmentIncome(qualified_dividends=1200, interest=3200, social_security=30000)
    after = [
        allocate_withdrawal(g, [], accounts, income, MFJ, 0.05).after_tax
        for g in np.linspace(0, 600000, 301)
    ]
    assert all(b >= a - 1e-6 for a, b in zip(after, after[1:]))


def test_result_is_immutable():
    res = allocate_withdrawal(1000, [], AccountPool(pre_tax=5000), NO_INCOME, SINGLE)
    with pytest.raises(dataclasses.FrozenInstanceError):
        res.after_tax = 0
