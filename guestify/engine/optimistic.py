"""
Optimistic Updates
Two-phase local writes: apply the new value now, keep the old one, and put it
back if the remote call fails.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

PENDING = 'pending'
APPLIED = 'applied'
COMMITTED = 'committed'
ROLLED_BACK = 'rolled_back'
SUPERSEDED = 'superseded'


class PendingChange:
    """One attribute write on one object, with the value it replaced."""

    def __init__(self, target: Any, attr: str, new_value: Any):
        self.target = target
        self.attr = attr
        self.new_value = new_value
        self.previous = getattr(target, attr)
        self.state = PENDING

    def apply(self):
        setattr(self.target, self.attr, self.new_value)
        self.state = APPLIED

    def commit(self):
        self.state = COMMITTED

    def rollback(self):
        """Restore the previous value. Only an applied change can be rolled back."""
        if self.state != APPLIED:
            return
        setattr(self.target, self.attr, self.previous)
        self.state = ROLLED_BACK

    def __repr__(self):
        return f"PendingChange({self.attr}: {self.previous!r} -> {self.new_value!r}, {self.state})"


@contextmanager
def optimistic(target: Any, attr: str, new_value: Any,
               is_current: Optional[Callable[[], bool]] = None):
    """
    Context manager for an optimistic write.
    Applies on entry, commits on clean exit, rolls back on error and re-raises.

    is_current: when given and it returns False at failure time, a newer write
    owns the attribute and the rollback is skipped.

    Usage:
        with optimistic(appearance, 'status', 'aired'):
            client.patch(f"appearances/{appearance.id}", {'status': 'aired'})
    """
    change = PendingChange(target, attr, new_value)
    change.apply()
    try:
        yield change
        change.commit()
    except Exception:
        if is_current is None or is_current():
            change.rollback()
            logger.debug(f"Rolled back {change!r}")
        else:
            change.state = SUPERSEDED
            logger.debug(f"Skipped stale rollback {change!r}")
        raise
