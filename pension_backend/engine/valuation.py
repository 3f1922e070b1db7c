"""Present-value and annuity formulas for retirement plans.

All arithmetic is done on Python integers. Rates arrive in basis points, so a
ratio such as ``(1 + i) / (1 + r)`` is kept as the integer pair
``(10000 + i, 10000 + r)`` and powers of it are exact. Only the final division
floors to the smallest unit of the amount's currency.
"""
from __future__ import annotations

from ..data_model.plan import BASIS_POINTS, MONTHS_PER_YEAR, PlanParameters
from .errors import InvalidParameters

MAX_AGE = 120
MAX_LIFE_EXPECTANCY_YEARS = 100


def _power(base: int, exponent: int) -> int:
    result = 1
    for _ in range(exponent):
        result *= base
    return result


def validate_parameters(params: PlanParameters) -> None:
    if params.life_expectancy_years <= 0:
        raise InvalidParameters("Life expectancy must be greater than zero.")
    if params.life_expectancy_years > MAX_LIFE_EXPECTANCY_YEARS:
        raise InvalidParameters(f"Life expectancy must be at most {MAX_LIFE_EXPECTANCY_YEARS} years.")
    if params.monthly_spending <= 0:
        raise InvalidParameters("Monthly spending must be greater than zero.")
    if params.current_age <= 0:
        raise InvalidParameters("Current age must be greater than zero.")
    if params.retirement_age <= params.current_age:
        raise InvalidParameters("Retirement age must be greater than current age.")
    if params.retirement_age > MAX_AGE:
        raise InvalidParameters(f"Retirement age must be at most {MAX_AGE}.")
    for label, rate in (("Yield", params.expected_yield_rate), ("Inflation", params.inflation_rate)):
        if rate < 0:
            raise InvalidParameters(f"{label} rate cannot be negative.")
        if rate > BASIS_POINTS:
            raise InvalidParameters(f"{label} rate must be at most {BASIS_POINTS} basis points.")


def required_target(params: PlanParameters) -> int:
    """Capital needed today, in reference units, to fund the plan's payouts.

    Sums ``12 * monthly_spending * ratio ** (y + k)`` for ``k`` in
    ``0 .. L - 1`` where ``ratio = (1 + inflation) / (1 + yield)`` and ``y`` is
    the number of years until retirement. The geometric series is evaluated
    in closed form; when the two rates are equal the ratio is one and the sum
    is ``L`` equal terms.
    """
    validate_parameters(params)
    years = params.years_until_retirement
    life = params.life_expectancy_years
    annual = MONTHS_PER_YEAR * params.monthly_spending
    num = BASIS_POINTS + params.inflation_rate
    den = BASIS_POINTS + params.expected_yield_rate

    if params.inflation_rate == params.expected_yield_rate:
        return annual * _power(num, years) * life // _power(den, years)

    # ratio^y * (1 - ratio^L) / (1 - ratio)
    #   = num^y * (den^L - num^L) * den / (den^y * den^L * (den - num))
    numerator = annual * _power(num, years) * (_power(den, life) - _power(num, life)) * den
    denominator = _power(den, years) * _power(den, life) * (den - num)
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return numerator // denominator


def real_rate(params: PlanParameters) -> int:
    return max(params.expected_yield_rate - params.inflation_rate, 0)


def periodic_payment(target_amount: int, params: PlanParameters) -> int:
    """Level monthly payment that exhausts ``target_amount`` over the payout period.

    Uses the ordinary-annuity payment ``P * m / (1 - (1 + m) ** -N)`` with
    ``m`` the monthly real rate and ``N`` the number of monthly payments. A
    non-positive real rate spreads the target evenly. The result is in the
    same unit as ``target_amount``.
    """
    validate_parameters(params)
    if target_amount <= 0:
        return 0
    months = params.total_payments
    real = real_rate(params)
    if real == 0:
        return target_amount // months

    # m = real / (12 * BP); with a = 12 * BP + real and b = 12 * BP:
    # P * m / (1 - (1 + m)^-N) = P * real * a^N / (12 * BP * (a^N - b^N))
    monthly_scale = MONTHS_PER_YEAR * BASIS_POINTS
    grown = _power(monthly_scale + real, months)
    base = _power(monthly_scale, months)
    return target_amount * real * grown // (monthly_scale * (grown - base))
