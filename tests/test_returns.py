import math

import numpy as np
import pytest

from withdrawal_planner.calculators import monte_carlo


def test_zero_shock_returns_geometric_mean():
    assert monte_carlo.generate_return(0.07, 0.18, z=0.0) == pytest.approx(0.07, abs=1e-12)


def test_return_increases_with_shock():
    returns = [monte_carlo.generate_return(0.07, 0.18, z=z) for z in np.linspace(-4.9, 4.9, 50)]
    assert all(b > a for a, b in zip(returns, returns[1:]))
    assert monte_carlo.generate_return(0.07, 0.18, z=2) > 0.07
    assert monte_carlo.generate_return(0.07, 0.18, z=-2) < 0.07


def test_shock_is_clamped():
    assert monte_carlo.generate_return(0.07, 0.18, z=5) == monte_carlo.generate_return(0.07, 0.18, z=10)
    assert monte_carlo.generate_return(0.07, 0.18, z=-5) == monte_carlo.generate_return(0.07, 0.18, z=-12)


def test_return_never_below_minus_100_percent():
    assert monte_carlo.generate_return(0.07, 0.18, z=-5) > -1
    assert monte_carlo.generate_return(-0.5, 0.9, z=-50) > -1


@pytest.mark.parametrize("z", [2.0, -3.0, 0.0])
def test_zero_volatility_returns_mean(z):
    assert monte_carlo.generate_return(0.05, 0.0, z=z) == pytest.approx(0.05, abs=1e-12)


def test_log_normal_transform():
    expected = math.exp(math.log(1.07) + 0.18 * 1.5) - 1
    assert monte_carlo.generate_return(0.07, 0.18, z=1.5) == pytest.approx(expected)


def test_random_shock_is_repeatable_with_seed():
    r1 = monte_carlo.generate_return(0.07, 0.18, rng=np.random.default_rng(123))
    r2 = monte_carlo.generate_return(0.07, 0.18, rng=np.random.default_rng(123))
    assert r1 == r2
    assert math.isfinite(r1) and r1 > -1


def test_default_rng_draw_is_valid():
    result = monte_carlo.generate_return(0.07, 0.18)
    assert math.isfinite(result) and result > -1
