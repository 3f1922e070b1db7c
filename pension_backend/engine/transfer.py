from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple


class ValueTransfer(ABC):
    @abstractmethod
    def send(self, identity: str, amount: int) -> bool:
        """Move ``amount`` settlement units to ``identity``; return False on failure."""


class InMemoryTransfer(ValueTransfer):
    """Keeps sent amounts in memory.

    ``fail`` makes every send report failure. ``on_send`` runs before the send
    is recorded, the way a recipient callback would.
    """

    def __init__(self, on_send: Optional[Callable[[str, int], None]] = None) -> None:
        self.sent: List[Tuple[str, int]] = []
        self.balances: Dict[str, int] = {}
        self.fail = False
        self.on_send = on_send

    def send(self, identity: str, amount: int) -> bool:
        if self.fail:
            return False
        if self.on_send is not None:
            self.on_send(identity, amount)
        self.sent.append((identity, amount))
        self.balances[identity] = self.balances.get(identity, 0) + amount
        return True

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)
