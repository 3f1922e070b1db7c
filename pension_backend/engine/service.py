"""Facade wiring the plan store, funding ledger and payout scheduler together."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pandas as pd

from ..data_model.plan import Plan, PlanParameters, Savings, Totals
from ..settings import EngineSettings
from .aggregate import aggregate_period
from .clock import Clock, SystemClock
from .context import EngineContext
from .events import EventBus, Listener
from .guard import OperationGuard
from .journal import SqliteTransferJournal
from .ledger import FundingLedger
from .plan_store import PlanStore
from .rates import FixedRateConverter, PriceFeed, PriceFeedRateConverter, RateConverter
from .schedule import project_payouts
from .scheduler import PayoutScheduler, PayoutStatus, payout_status
from .state import VaultState
from .transfer import ValueTransfer
from .valuation import periodic_payment, required_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    target_reference: int
    target_settlement: int
    payment_settlement: int
    payment_reference: int

    def to_dict(self) -> Dict[str, str]:
        return {
            "targetReference": str(self.target_reference),
            "targetSettlement": str(self.target_settlement),
            "paymentSettlement": str(self.payment_settlement),
            "paymentReference": str(self.payment_reference),
        }


class RetirementEngine:
    def __init__(
        self,
        state: VaultState,
        rates: RateConverter,
        transfer: ValueTransfer,
        clock: Optional[Clock] = None,
        payment_interval: Optional[int] = None,
    ) -> None:
        self.ctx = EngineContext(
            state=state,
            rates=rates,
            transfer=transfer,
            clock=clock or SystemClock(),
            bus=EventBus(),
            guard=OperationGuard(),
        )
        if payment_interval is not None:
            self.ctx.payment_interval = payment_interval
        self.scheduler = PayoutScheduler(self.ctx)
        self.plans = PlanStore(self.ctx, self.scheduler)
        self.ledger = FundingLedger(self.ctx, self.scheduler)

    @property
    def state(self) -> VaultState:
        return self.ctx.state

    def subscribe(self, listener: Listener):
        return self.ctx.bus.subscribe(listener)

    # -- operations -------------------------------------------------------

    def create_plan(self, identity: str, params: PlanParameters) -> Savings:
        return self.plans.create(identity, params)

    def update_plan(self, identity: str, params: PlanParameters) -> Savings:
        return self.plans.update(identity, params)

    def deactivate_plan(self, identity: str) -> Plan:
        return self.plans.deactivate(identity)

    def contribute(self, identity: str, amount: int) -> Savings:
        return self.ledger.contribute(identity, amount)

    def reclaim(self, identity: str) -> int:
        return self.ledger.reclaim(identity)

    def disburse(self, identity: str) -> int:
        return self.scheduler.disburse(identity)

    # -- views ------------------------------------------------------------

    def get_plan(self, identity: str) -> Plan | None:
        return self.state.get_plan(identity)

    def get_savings(self, identity: str) -> Savings | None:
        return self.state.get_savings(identity)

    def totals(self) -> Totals:
        return self.state.get_totals()

    def quote(self, params: PlanParameters) -> Quote:
        target_reference = required_target(params)
        target_settlement = self.ctx.rates.to_settlement_units(target_reference)
        return Quote(
            target_reference=target_reference,
            target_settlement=target_settlement,
            payment_settlement=periodic_payment(target_settlement, params),
            payment_reference=periodic_payment(target_reference, params),
        )

    def current_price(self) -> int:
        """Reference units one whole settlement unit is worth right now."""
        return self.ctx.rates.checked_price()

    def to_settlement_units(self, reference_amount: int) -> int:
        return self.ctx.rates.to_settlement_units(reference_amount)

    def to_reference_units(self, settlement_amount: int) -> int:
        return self.ctx.rates.to_reference_units(settlement_amount)

    def required_investment(self, identity: str) -> int:
        """Target of the identity's stored plan in reference units; 0 without a plan."""
        plan = self.state.get_plan(identity)
        return required_target(plan.params) if plan else 0

    def has_reached_target(self, identity: str) -> bool:
        savings = self.state.get_savings(identity)
        return bool(savings and savings.target_reached)

    def remaining_amount(self, identity: str) -> int:
        savings = self.state.get_savings(identity)
        if savings is None:
            return 0
        return max(savings.target_amount - savings.total_deposited, 0)

    def dashboard(self, identity: str) -> Dict[str, Any] | None:
        plan, savings = self.state.working_copy(identity)
        if plan is None or savings is None:
            return None
        status = payout_status(savings)
        progress = 0.0
        if savings.target_amount:
            progress = min(savings.total_deposited / savings.target_amount, 1.0) * 100.0
        next_time = None
        if status is PayoutStatus.ARMED:
            next_time = savings.last_payment_time + self.ctx.payment_interval
        return {
            "identity": identity,
            "plan": plan.to_dict(),
            "savings": savings.to_dict(),
            "status": status.value,
            "progressPercentage": round(progress, 2),
            "monthlyPayment": str(self.scheduler.payment_amount(plan, savings) if savings.payments_started
                                  else periodic_payment(savings.target_amount, plan.params)),
            "nextPaymentTime": next_time,
            "paymentsReceived": plan.params.total_payments - savings.payments_remaining,
            "hasReachedTarget": savings.target_reached,
            "remainingAmount": str(max(savings.target_amount - savings.total_deposited, 0)),
        }

    def schedule(self, identity: str, freq: str = "M") -> pd.DataFrame:
        plan, savings = self.state.working_copy(identity)
        if plan is None or savings is None:
            return pd.DataFrame()
        projected = project_payouts(
            plan, savings, self.ctx.clock.now(), self.ctx.payment_interval, identity=identity
        )
        return aggregate_period(projected, freq=freq)


def build_engine(settings: Optional[EngineSettings] = None, price_feed: Optional[PriceFeed] = None) -> RetirementEngine:
    """Wire the engine to the JSON vault and the sqlite transfer journal under ``data_dir``.

    Without a ``price_feed`` the configured reference price is used as a fixed rate.
    """
    settings = settings or EngineSettings.from_env()
    clock = SystemClock()
    state = VaultState(os.path.join(settings.data_dir, "vault.json"))
    journal = SqliteTransferJournal(os.path.join(settings.data_dir, "ledger", "transfers.sqlite"))
    if price_feed is not None:
        rates: RateConverter = PriceFeedRateConverter(price_feed, clock, max_age=settings.rate_max_age)
    else:
        rates = FixedRateConverter(settings.reference_price)
    logger.info("Engine using data dir %s", settings.data_dir)
    return RetirementEngine(state, rates, journal, clock=clock, payment_interval=settings.payment_interval)
