from fractions import Fraction

import pytest

from pension_backend.engine.errors import InvalidParameters
from pension_backend.engine.valuation import periodic_payment, required_target


def _exact_target(params) -> Fraction:
    ratio = Fraction(10000 + params.inflation_rate, 10000 + params.expected_yield_rate)
    years = params.retirement_age - params.current_age
    return sum(
        12 * params.monthly_spending * ratio ** (years + k) for k in range(params.life_expectancy_years)
    )


def test_equal_rates_use_simplified_formula_exactly(make_params):
    params = make_params(expected_yield_rate=300, inflation_rate=300)

    target = required_target(params)

    assert target == 12 * params.monthly_spending * params.life_expectancy_years


@pytest.mark.parametrize("yield_rate,inflation_rate", [(500, 200), (200, 500), (0, 254), (10000, 0), (700, 699)])
def test_different_rates_match_geometric_series(make_params, yield_rate, inflation_rate):
    params = make_params(expected_yield_rate=yield_rate, inflation_rate=inflation_rate)

    target = required_target(params)
    expected = _exact_target(params)

    assert target > 0
    assert target == expected.numerator // expected.denominator


def test_target_is_floor_of_discounted_sum(make_params):
    params = make_params()
    exact = _exact_target(params)

    assert required_target(params) == exact.numerator // exact.denominator


def test_scenario_target_is_positive(make_params):
    assert required_target(make_params()) > 0


def test_target_increases_with_spending_and_life_expectancy(make_params):
    base = required_target(make_params())

    assert required_target(make_params(monthly_spending=6000 * 10 ** 8)) > base
    assert required_target(make_params(life_expectancy_years=25)) > base


@pytest.mark.parametrize(
    "overrides",
    [
        {"life_expectancy_years": 0},
        {"monthly_spending": 0},
        {"retirement_age": 30},
        {"retirement_age": 29},
        {"expected_yield_rate": 10001},
        {"inflation_rate": 10001},
        {"inflation_rate": -1},
        {"life_expectancy_years": 101},
    ],
)
def test_invalid_parameters_are_rejected(make_params, overrides):
    with pytest.raises(InvalidParameters):
        required_target(make_params(**overrides))


def test_full_rate_is_accepted(make_params):
    assert required_target(make_params(expected_yield_rate=10000, inflation_rate=10000)) > 0


def test_payment_without_real_return_spreads_target_evenly(make_params):
    params = make_params(expected_yield_rate=300, inflation_rate=300)

    assert periodic_payment(2_400_000, params) == 10_000


def test_payment_when_inflation_exceeds_yield_uses_zero_real_rate(make_params):
    params = make_params(expected_yield_rate=100, inflation_rate=400)

    assert periodic_payment(2_400_001, params) == 10_000


def test_payment_matches_ordinary_annuity(make_params):
    params = make_params()
    target = 10 ** 24
    m = (params.expected_yield_rate - params.inflation_rate) / 10000 / 12
    n = params.life_expectancy_years * 12
    expected = target * m / (1 - (1 + m) ** -n)

    payment = periodic_payment(target, params)

    assert abs(payment - expected) / expected < 1e-9
    assert payment > target // n


def test_payment_of_empty_target_is_zero(make_params):
    assert periodic_payment(0, make_params()) == 0
