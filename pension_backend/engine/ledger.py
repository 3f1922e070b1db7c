"""Contributions toward a plan's target and refunds of deactivated plans."""
from __future__ import annotations

import logging
from typing import List

from ..data_model.plan import Savings
from .context import EngineContext
from .errors import (
    InvalidParameters,
    NoActivePlan,
    NothingToReclaim,
    PaymentsAlreadyStarted,
    PlanStillActive,
    ZeroAmount,
)
from .events import Event, FundsContributed, FundsReclaimed, TargetReached
from .scheduler import PayoutScheduler

logger = logging.getLogger(__name__)


class FundingLedger:
    def __init__(self, ctx: EngineContext, scheduler: PayoutScheduler) -> None:
        self.ctx = ctx
        self.scheduler = scheduler

    def contribute(self, identity: str, amount: int) -> Savings:
        """Add ``amount`` settlement units to the plan's deposits.

        The contribution that first brings deposits to the target also arms
        payouts and pays period one; if that payment cannot be sent the whole
        contribution is rejected.
        """
        if amount < 0:
            raise InvalidParameters("Contribution cannot be negative.")
        with self.ctx.guard.hold(identity):
            plan, savings = self.ctx.state.working_copy(identity)
            if plan is None or savings is None or not plan.is_active:
                raise NoActivePlan()
            if amount == 0:
                raise ZeroAmount()
            if savings.payments_started:
                raise PaymentsAlreadyStarted("Cannot deposit after payments started.")

            savings.total_deposited += amount
            events: List[Event] = [FundsContributed(identity, amount, savings.total_deposited, savings.target_amount)]
            send_amount = 0
            payments = 0
            if savings.target_reached:
                events.append(TargetReached(identity, savings.target_amount))
                send_amount, paid = self.scheduler.arm(identity, plan, savings, self.ctx.clock.now())
                events += paid
                payments = 1
            self.ctx.settle(
                identity,
                plan,
                savings,
                send_amount=send_amount,
                funds_delta=amount - send_amount,
                payments_delta=payments,
            )
        logger.info("Contribution of %s from %s, total %s of %s", amount, identity,
                    savings.total_deposited, savings.target_amount)
        self.ctx.publish(events)
        return savings

    def reclaim(self, identity: str) -> int:
        """Return every deposited unit of a deactivated, never-armed plan."""
        with self.ctx.guard.hold(identity):
            plan, savings = self.ctx.state.working_copy(identity)
            if plan is None or savings is None:
                raise NothingToReclaim()
            if savings.payments_started:
                raise PaymentsAlreadyStarted("Cannot withdraw after payments started.")
            if plan.is_active:
                raise PlanStillActive()
            amount = savings.total_deposited
            if amount == 0:
                raise NothingToReclaim()
            savings.total_deposited = 0
            self.ctx.settle(identity, plan, savings, send_amount=amount, funds_delta=-amount)
        logger.info("Reclaimed %s for %s", amount, identity)
        self.ctx.publish([FundsReclaimed(identity, amount)])
        return amount
