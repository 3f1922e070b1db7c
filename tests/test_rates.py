import pytest

from pension_backend.engine.clock import ManualClock
from pension_backend.engine.errors import RateUnavailable
from pension_backend.engine.rates import FixedRateConverter, PriceFeedRateConverter

PRICE = 3000 * 10 ** 8


def test_reference_to_settlement_conversion():
    rates = FixedRateConverter(PRICE)

    assert rates.to_settlement_units(1000 * 10 ** 8) == 333333333333333333


def test_settlement_to_reference_conversion():
    rates = FixedRateConverter(PRICE)

    assert rates.to_reference_units(10 ** 18) == PRICE


@pytest.mark.parametrize("price", [0, -1])
def test_invalid_price_is_unavailable(price):
    rates = FixedRateConverter(price)

    with pytest.raises(RateUnavailable):
        rates.to_settlement_units(10 ** 8)


def test_fresh_feed_answer_is_used():
    clock = ManualClock(start=5_000)
    rates = PriceFeedRateConverter(lambda: (4000 * 10 ** 8, 4_000), clock, max_age=3600)

    assert rates.to_reference_units(10 ** 18) == 4000 * 10 ** 8


def test_stale_feed_answer_is_rejected():
    clock = ManualClock(start=5_000)
    rates = PriceFeedRateConverter(lambda: (PRICE, 1_000), clock, max_age=3600)

    with pytest.raises(RateUnavailable):
        rates.to_settlement_units(10 ** 8)


def test_feed_failure_is_unavailable():
    def broken_feed():
        raise LookupError("no round data")

    rates = PriceFeedRateConverter(broken_feed, ManualClock(), max_age=3600)

    with pytest.raises(RateUnavailable):
        rates.to_settlement_units(10 ** 8)
