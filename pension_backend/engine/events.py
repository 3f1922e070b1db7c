"""Notifications published by the engine once an operation has committed."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    identity: str

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class PlanCreated(Event):
    target_amount: int


@dataclass(frozen=True)
class PlanUpdated(Event):
    target_amount: int


@dataclass(frozen=True)
class PlanDeactivated(Event):
    pass


@dataclass(frozen=True)
class FundsContributed(Event):
    amount: int
    total_deposited: int
    target_amount: int


@dataclass(frozen=True)
class TargetReached(Event):
    target_amount: int


@dataclass(frozen=True)
class PaymentSent(Event):
    amount: int
    payments_remaining: int


@dataclass(frozen=True)
class PaymentsCompleted(Event):
    total_paid_out: int


@dataclass(frozen=True)
class FundsReclaimed(Event):
    amount: int


Listener = Callable[[Event], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, events: List[Event]) -> None:
        for event in events:
            logger.debug("%s %s", event.name, event.identity)
            for listener in list(self._listeners):
                listener(event)
