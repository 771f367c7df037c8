"""Single-instance guard for scraper runs."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


class RunLockError(RuntimeError):
    """Raised when another scraper run already holds the lock."""


@contextmanager
def exclusive_run_lock(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive, cross-process lock for the duration of a run.

    Fails fast if another process holds it. The state documents assume a
    single writer.
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(lock_path), os.O_CREAT | os.O_RDWR)

    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        os.close(fd)
        raise RunLockError(
            f"Another scraper run is active. Stop it or wait for it to finish. Lock file: {lock_path}"
        )

    try:
        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode("ascii"))
        yield
    finally:
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
