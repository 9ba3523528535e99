from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for registration and shared resolution.

    Pass one of these values as ``Container(lock_mode=...)``. Use ``THREAD``
    when one container serves several worker threads; use ``NONE`` for a
    container that only ever runs on one thread.
    """

    THREAD = "thread"
    """Guard registries with a re-entrant lock and shared instances with per-identifier locks."""

    NONE = "none"
    """Disable locking around registry mutations and instance cache writes."""
