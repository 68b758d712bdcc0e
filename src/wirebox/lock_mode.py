from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for shared instance creation.

    Use ``THREAD`` (the default) when a built container is shared between
    threads. ``NONE`` skips the per-registration lock for single-threaded
    programs that want to avoid the acquire/release cost.
    """

    THREAD = "thread"
    """Guard shared instances with a ``threading.RLock`` per registration."""

    NONE = "none"
    """Disable locking around shared instance creation."""
