from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from .errors import ReentrantCall


class OperationGuard:
    """Serializes mutating operations per identity and rejects nested ones.

    Operations on one identity take turns; operations on different identities
    run side by side. A mutating call started while the same thread is already
    inside one (for example from a transfer recipient's callback) raises
    ``ReentrantCall`` instead of waiting on itself.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._local = threading.local()

    def _lock_for(self, identity: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(identity)
            if lock is None:
                lock = self._locks[identity] = threading.Lock()
            return lock

    def in_progress(self) -> bool:
        return getattr(self._local, "identity", None) is not None

    @contextmanager
    def hold(self, identity: str) -> Iterator[None]:
        if self.in_progress():
            raise ReentrantCall(f"Operation for {self._local.identity} still in progress.")
        with self._lock_for(identity):
            self._local.identity = identity
            try:
                yield
            finally:
                self._local.identity = None
