# engine/state.py
from __future__ import annotations

import copy
import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..data_model.plan import Plan, Savings, Totals
from .storage import load_snapshot, save_snapshot

logger = logging.getLogger(__name__)


def _snapshot_of(plans: Dict[str, Plan], savings: Dict[str, Savings], totals: Totals) -> Dict[str, dict]:
    return {
        "plans": {identity: plan.to_dict() for identity, plan in plans.items()},
        "savings": {identity: record.to_dict() for identity, record in savings.items()},
        "totals": totals.to_dict(),
    }


class VaultState:
    """Keyed store of plans and savings owned by the engine.

    Readers get copies; components mutate their own copies and hand them back
    through ``commit`` once an operation has fully succeeded. Every commit
    writes the whole vault so the file is always a consistent point in time.
    Pass ``storage_path=None`` to keep the vault in memory only.
    """

    def __init__(self, storage_path: Optional[str] = "user_data/vault.json"):
        self.storage_path = storage_path
        self._lock = threading.RLock()
        raw = load_snapshot(storage_path) if storage_path else {}
        self.plans: Dict[str, Plan] = {
            identity: Plan.from_dict(data) for identity, data in (raw.get("plans") or {}).items()
        }
        self.savings: Dict[str, Savings] = {
            identity: Savings.from_dict(data) for identity, data in (raw.get("savings") or {}).items()
        }
        self.totals = Totals.from_dict(raw.get("totals") or {})

    def list_identities(self) -> List[str]:
        with self._lock:
            return sorted(self.plans.keys())

    def get_plan(self, identity: str) -> Plan | None:
        with self._lock:
            plan = self.plans.get(identity)
            return copy.deepcopy(plan) if plan else None

    def get_savings(self, identity: str) -> Savings | None:
        with self._lock:
            savings = self.savings.get(identity)
            return copy.deepcopy(savings) if savings else None

    def working_copy(self, identity: str) -> Tuple[Plan | None, Savings | None]:
        with self._lock:
            return self.get_plan(identity), self.get_savings(identity)

    def get_totals(self) -> Totals:
        with self._lock:
            return copy.deepcopy(self.totals)

    def commit(
        self,
        identity: str,
        plan: Plan,
        savings: Savings,
        funds_delta: int = 0,
        payments_delta: int = 0,
    ) -> None:
        """Persist the new records, then make them visible.

        If the write fails the exception propagates and readers keep seeing
        the records as they were before the operation.
        """
        with self._lock:
            plans = dict(self.plans)
            plans[identity] = copy.deepcopy(plan)
            savings_map = dict(self.savings)
            savings_map[identity] = copy.deepcopy(savings)
            totals = Totals(
                total_funds_under_management=self.totals.total_funds_under_management + funds_delta,
                total_payments_processed=self.totals.total_payments_processed + payments_delta,
            )
            self._save(_snapshot_of(plans, savings_map, totals))
            self.plans, self.savings, self.totals = plans, savings_map, totals

    def snapshot(self) -> Dict[str, dict]:
        with self._lock:
            return _snapshot_of(self.plans, self.savings, self.totals)

    def _save(self, snapshot: Dict[str, dict]) -> None:
        if not self.storage_path:
            return
        save_snapshot(self.storage_path, snapshot)
        logger.debug("Vault saved to %s", self.storage_path)
