"""State module."""

from .lock import RunLockError, exclusive_run_lock
from .store import StateStore

__all__ = [
    "StateStore",
    "RunLockError",
    "exclusive_run_lock",
]
