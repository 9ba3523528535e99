from __future__ import annotations

import threading
from collections.abc import Hashable
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from bindwire.lock_mode import LockMode

_MISSING = object()


class InstanceCache:
    """Memoize shared instances keyed by canonical identifier.

    With ``LockMode.THREAD`` every identifier gets its own re-entrant lock so
    callers can double-check the cache around construction and guarantee a
    single instance per shared identifier under concurrent resolution.
    """

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._lock_mode = lock_mode
        self._instances: dict[Hashable, Any] = {}
        self._pinned: set[Hashable] = set()
        self._locks: dict[Hashable, threading.RLock] = {}
        self._locks_lock = threading.Lock()

    def get(self, abstract: Hashable, default: Any = None) -> Any:
        return self._instances.get(abstract, default)

    def lookup(self, abstract: Hashable) -> tuple[bool, Any]:
        """Return ``(found, instance)`` in one dictionary read."""
        instance = self._instances.get(abstract, _MISSING)
        if instance is _MISSING:
            return False, None
        return True, instance

    def set(self, abstract: Hashable, instance: Any, *, pinned: bool = False) -> None:
        """Cache ``instance``; ``pinned`` marks objects given to ``Container.instance``."""
        self._instances[abstract] = instance
        if pinned:
            self._pinned.add(abstract)
        else:
            self._pinned.discard(abstract)

    def is_pinned(self, abstract: Hashable) -> bool:
        return abstract in self._pinned

    def remove(self, abstract: Hashable) -> None:
        self._instances.pop(abstract, None)
        self._pinned.discard(abstract)

    def clear(self) -> None:
        self._instances.clear()
        self._pinned.clear()
        with self._locks_lock:
            self._locks.clear()

    def lock_for(self, abstract: Hashable) -> AbstractContextManager[Any]:
        """Get or create the construction lock of ``abstract``.

        Uses double-checked locking to minimize lock contention.
        """
        if self._lock_mode is LockMode.NONE:
            return nullcontext()
        lock = self._locks.get(abstract)
        if lock is None:
            with self._locks_lock:
                lock = self._locks.get(abstract)
                if lock is None:
                    lock = threading.RLock()
                    self._locks[abstract] = lock
        return lock

    def __contains__(self, abstract: object) -> bool:
        return abstract in self._instances

    def __len__(self) -> int:
        return len(self._instances)


__all__ = ["InstanceCache"]
