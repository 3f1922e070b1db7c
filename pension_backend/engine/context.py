from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..data_model.plan import Plan, Savings
from .clock import Clock
from .errors import TransferFailed
from .events import Event, EventBus
from .guard import OperationGuard
from .rates import RateConverter
from .state import VaultState
from .transfer import ValueTransfer

logger = logging.getLogger(__name__)

PAYMENT_INTERVAL = 30 * 24 * 60 * 60


@dataclass
class EngineContext:
    """Collaborators shared by the plan store, ledger and scheduler."""

    state: VaultState
    rates: RateConverter
    transfer: ValueTransfer
    clock: Clock
    bus: EventBus = field(default_factory=EventBus)
    guard: OperationGuard = field(default_factory=OperationGuard)
    payment_interval: int = PAYMENT_INTERVAL

    def settle(
        self,
        identity: str,
        plan: Plan,
        savings: Savings,
        send_amount: int = 0,
        funds_delta: int = 0,
        payments_delta: int = 0,
    ) -> None:
        """Move value, then commit the working copies.

        Nothing reaches the vault unless the transfer succeeded, so a failed
        send leaves every record as it was before the operation.
        """
        if send_amount:
            if not self.transfer.send(identity, send_amount):
                logger.warning("Transfer of %s to %s failed; operation rolled back", send_amount, identity)
                raise TransferFailed(f"Transfer of {send_amount} to {identity} failed.")
        try:
            self.state.commit(identity, plan, savings, funds_delta=funds_delta, payments_delta=payments_delta)
        except OSError:
            if send_amount:
                logger.error("Transfer of %s to %s was sent but the vault could not be saved", send_amount, identity)
            raise

    def publish(self, events: List[Event]) -> None:
        self.bus.publish(events)
