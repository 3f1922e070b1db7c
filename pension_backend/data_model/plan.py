# data_model/plan.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

BASIS_POINTS = 10_000
MONTHS_PER_YEAR = 12

# Reference currency amounts carry 8 decimals, settlement amounts 18.
REFERENCE_DECIMALS = 8
SETTLEMENT_DECIMALS = 18
REFERENCE_SCALE = 10 ** REFERENCE_DECIMALS
SETTLEMENT_SCALE = 10 ** SETTLEMENT_DECIMALS


@dataclass(frozen=True)
class PlanParameters:
    life_expectancy_years: int
    monthly_spending: int  # reference currency, smallest unit
    retirement_age: int
    current_age: int
    expected_yield_rate: int = 500  # basis points
    inflation_rate: int = 200  # basis points

    @property
    def years_until_retirement(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def total_payments(self) -> int:
        return self.life_expectancy_years * MONTHS_PER_YEAR

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanParameters":
        return cls(
            life_expectancy_years=int(data["life_expectancy_years"]),
            monthly_spending=int(data["monthly_spending"]),
            retirement_age=int(data["retirement_age"]),
            current_age=int(data["current_age"]),
            expected_yield_rate=int(data.get("expected_yield_rate", 500)),
            inflation_rate=int(data.get("inflation_rate", 200)),
        )


@dataclass
class Plan:
    params: PlanParameters
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.params.to_dict()
        payload["is_active"] = self.is_active
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Plan":
        return cls(params=PlanParameters.from_dict(data), is_active=bool(data.get("is_active", True)))


@dataclass
class Savings:
    """Funding and payout counters paired with a plan.

    Amounts are settlement units; ``last_payment_time`` is a clock reading in
    seconds (zero until payouts are armed).
    """

    target_amount: int
    payments_remaining: int
    total_deposited: int = 0
    payments_started: bool = False
    last_payment_time: int = 0
    total_paid_out: int = 0

    @property
    def available(self) -> int:
        return self.total_deposited - self.total_paid_out

    @property
    def target_reached(self) -> bool:
        return self.total_deposited >= self.target_amount

    def to_dict(self) -> Dict[str, Any]:
        # Settlement amounts overflow JSON-safe integers in most clients.
        return {
            "target_amount": str(self.target_amount),
            "payments_remaining": self.payments_remaining,
            "total_deposited": str(self.total_deposited),
            "payments_started": self.payments_started,
            "last_payment_time": self.last_payment_time,
            "total_paid_out": str(self.total_paid_out),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Savings":
        return cls(
            target_amount=int(data["target_amount"]),
            payments_remaining=int(data["payments_remaining"]),
            total_deposited=int(data.get("total_deposited", 0)),
            payments_started=bool(data.get("payments_started", False)),
            last_payment_time=int(data.get("last_payment_time", 0)),
            total_paid_out=int(data.get("total_paid_out", 0)),
        )


@dataclass
class Totals:
    total_funds_under_management: int = 0
    total_payments_processed: int = 0  # count of disbursements

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_funds_under_management": str(self.total_funds_under_management),
            "total_payments_processed": self.total_payments_processed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Totals":
        return cls(
            total_funds_under_management=int(data.get("total_funds_under_management", 0)),
            total_payments_processed=int(data.get("total_payments_processed", 0)),
        )
