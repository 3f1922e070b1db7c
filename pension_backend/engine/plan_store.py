from __future__ import annotations

import logging
from typing import List

from ..data_model.plan import Plan, PlanParameters, Savings
from .context import EngineContext
from .errors import InvalidParameters, NoActivePlan, PaymentsAlreadyStarted
from .events import Event, PlanCreated, PlanDeactivated, PlanUpdated, TargetReached
from .scheduler import PayoutScheduler
from .valuation import required_target

logger = logging.getLogger(__name__)


class PlanStore:
    """Creates, updates and deactivates the single plan held by each identity."""

    def __init__(self, ctx: EngineContext, scheduler: PayoutScheduler) -> None:
        self.ctx = ctx
        self.scheduler = scheduler

    def settlement_target(self, params: PlanParameters) -> int:
        target = self.ctx.rates.to_settlement_units(required_target(params))
        if target <= 0:
            raise InvalidParameters("Required target rounds to zero settlement units.")
        return target

    def create(self, identity: str, params: PlanParameters) -> Savings:
        with self.ctx.guard.hold(identity):
            target = self.settlement_target(params)
            previous = self.ctx.state.get_savings(identity)
            if previous is not None and previous.payments_started:
                raise PaymentsAlreadyStarted("Cannot replace a plan after payments started.")
            # Funds already held for an earlier plan carry over to the new one.
            deposited = previous.total_deposited if previous else 0
            plan = Plan(params=params, is_active=True)
            savings = Savings(
                target_amount=target,
                payments_remaining=params.total_payments,
                total_deposited=deposited,
            )
            events: List[Event] = [PlanCreated(identity, target)]
            events += self._store(identity, plan, savings)
        logger.info("Plan created for %s with target %s", identity, target)
        self.ctx.publish(events)
        return savings

    def update(self, identity: str, params: PlanParameters) -> Savings:
        with self.ctx.guard.hold(identity):
            plan, savings = self._mutable(identity)
            target = self.settlement_target(params)
            plan.params = params
            savings.target_amount = target
            savings.payments_remaining = params.total_payments
            events: List[Event] = [PlanUpdated(identity, target)]
            events += self._store(identity, plan, savings)
        logger.info("Plan updated for %s with target %s", identity, target)
        self.ctx.publish(events)
        return savings

    def deactivate(self, identity: str) -> Plan:
        with self.ctx.guard.hold(identity):
            plan, savings = self._mutable(identity)
            plan.is_active = False
            self.ctx.settle(identity, plan, savings)
        logger.info("Plan deactivated for %s", identity)
        self.ctx.publish([PlanDeactivated(identity)])
        return plan

    def _mutable(self, identity: str):
        plan, savings = self.ctx.state.working_copy(identity)
        if plan is None or savings is None or not plan.is_active:
            raise NoActivePlan()
        if savings.payments_started:
            raise PaymentsAlreadyStarted()
        return plan, savings

    def _store(self, identity: str, plan: Plan, savings: Savings) -> List[Event]:
        # Carried-over deposits may already cover a new or lowered target.
        if savings.total_deposited and savings.target_reached:
            events: List[Event] = [TargetReached(identity, savings.target_amount)]
            amount, paid = self.scheduler.arm(identity, plan, savings, self.ctx.clock.now())
            self.ctx.settle(identity, plan, savings, send_amount=amount, funds_delta=-amount, payments_delta=1)
            return events + paid
        self.ctx.settle(identity, plan, savings)
        return []
