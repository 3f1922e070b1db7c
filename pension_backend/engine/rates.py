"""Conversion between the reference currency and settlement units.

A price is the number of reference units (8 decimals) one whole settlement
unit is worth, e.g. ``3000 * 10**8`` for 3000 USD per coin. Settlement amounts
carry 18 decimals.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Tuple

from ..data_model.plan import SETTLEMENT_SCALE
from .clock import Clock
from .errors import RateUnavailable

logger = logging.getLogger(__name__)

PriceFeed = Callable[[], Tuple[int, int]]


class RateConverter(ABC):
    @abstractmethod
    def current_price(self) -> int:
        """Return a fresh price or raise ``RateUnavailable``."""

    def to_settlement_units(self, reference_amount: int) -> int:
        return reference_amount * SETTLEMENT_SCALE // self.checked_price()

    def to_reference_units(self, settlement_amount: int) -> int:
        return settlement_amount * self.checked_price() // SETTLEMENT_SCALE

    def checked_price(self) -> int:
        price = self.current_price()
        if price <= 0:
            raise RateUnavailable("Invalid price feed answer.")
        return price


class FixedRateConverter(RateConverter):
    def __init__(self, price: int) -> None:
        self.price = int(price)

    def current_price(self) -> int:
        return self.price


class PriceFeedRateConverter(RateConverter):
    """Reads ``(price, updated_at)`` from an external feed and rejects stale answers."""

    def __init__(self, feed: PriceFeed, clock: Clock, max_age: int = 3600) -> None:
        self.feed = feed
        self.clock = clock
        self.max_age = max_age

    def current_price(self) -> int:
        try:
            price, updated_at = self.feed()
        except (LookupError, OSError, ValueError) as exc:
            raise RateUnavailable(f"Price feed failed: {exc}") from exc
        age = self.clock.now() - int(updated_at)
        if age > self.max_age:
            logger.warning("Stale price feed answer: %s seconds old", age)
            raise RateUnavailable("Stale price feed answer.")
        return int(price)
