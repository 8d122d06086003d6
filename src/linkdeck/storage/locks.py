"""File locking for the link data file."""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from pathlib import Path

from filelock import FileLock, Timeout


class LockTimeout(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""


def lock_path_for(data_file: Path) -> Path:
    """Return the lock file path guarding *data_file* (``<name>.lock`` beside it)."""
    return data_file.with_name(f"{data_file.name}.lock")


@contextlib.contextmanager
def data_lock(lock_path: Path, timeout: float = -1) -> Generator[None, None, None]:
    """Hold an exclusive file lock at *lock_path* for the duration of the block.

    Args:
        lock_path: Path of the lock file (created if missing).
        timeout: Seconds to wait before giving up.  A negative value waits
            indefinitely.

    Raises:
        LockTimeout: If the lock cannot be acquired within *timeout* seconds.
    """
    lock = FileLock(lock_path, timeout=timeout)
    try:
        lock.acquire()
    except Timeout:
        raise LockTimeout(f"Could not acquire lock '{lock_path.name}' within {timeout}s") from None
    try:
        yield
    finally:
        lock.release()
