"""Time-gated disbursement of an armed plan."""
from __future__ import annotations

import enum
import logging
from typing import List, Tuple

from ..data_model.plan import Plan, Savings
from .context import EngineContext
from .errors import NoFundsAvailable, NoPaymentsRemaining, NotArmed, TooEarly
from .events import Event, PaymentSent, PaymentsCompleted
from .valuation import periodic_payment

logger = logging.getLogger(__name__)


class PayoutStatus(str, enum.Enum):
    NOT_ARMED = "not_armed"
    ARMED = "armed"
    COMPLETED = "completed"


def payout_status(savings: Savings | None) -> PayoutStatus:
    if savings is None or not savings.payments_started:
        return PayoutStatus.NOT_ARMED
    if savings.payments_remaining == 0:
        return PayoutStatus.COMPLETED
    return PayoutStatus.ARMED


class PayoutScheduler:
    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx

    def status(self, identity: str) -> PayoutStatus:
        return payout_status(self.ctx.state.get_savings(identity))

    def next_payment_time(self, identity: str) -> int | None:
        savings = self.ctx.state.get_savings(identity)
        if payout_status(savings) is not PayoutStatus.ARMED:
            return None
        return savings.last_payment_time + self.ctx.payment_interval

    def payment_amount(self, plan: Plan, savings: Savings) -> int:
        """Periodic payment clamped to the funds still held for the plan."""
        return min(periodic_payment(savings.target_amount, plan.params), savings.available)

    def arm(self, identity: str, plan: Plan, savings: Savings, now: int) -> Tuple[int, List[Event]]:
        """Latch payouts on the working copies and prepare period one.

        Only the funding ledger calls this, inside the operation that met the
        target; the caller settles the returned amount.
        """
        savings.payments_started = True
        savings.last_payment_time = now
        logger.info("Payouts armed for %s at %s", identity, now)
        return self._prepare(identity, plan, savings, now)

    def disburse(self, identity: str) -> int:
        """Pay the next due period to ``identity``; any caller may trigger it."""
        with self.ctx.guard.hold(identity):
            plan, savings = self.ctx.state.working_copy(identity)
            if plan is None or savings is None or not savings.payments_started:
                raise NotArmed()
            if savings.payments_remaining == 0:
                raise NoPaymentsRemaining()
            now = self.ctx.clock.now()
            due = savings.last_payment_time + self.ctx.payment_interval
            if now < due:
                raise TooEarly(f"Too early for next payment; due at {due}.")
            amount, events = self._prepare(identity, plan, savings, now)
            self.ctx.settle(identity, plan, savings, send_amount=amount, funds_delta=-amount, payments_delta=1)
        self.ctx.publish(events)
        return amount

    def _prepare(self, identity: str, plan: Plan, savings: Savings, now: int) -> Tuple[int, List[Event]]:
        amount = self.payment_amount(plan, savings)
        if amount <= 0:
            raise NoFundsAvailable()
        savings.total_paid_out += amount
        savings.payments_remaining -= 1
        savings.last_payment_time = now
        events: List[Event] = [PaymentSent(identity, amount, savings.payments_remaining)]
        if savings.payments_remaining == 0:
            events.append(PaymentsCompleted(identity, savings.total_paid_out))
        logger.info("Payment of %s prepared for %s, %s remaining", amount, identity, savings.payments_remaining)
        return amount, events
