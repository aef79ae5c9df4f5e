from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterator

from filelock import FileLock, Timeout

from dig_wallet.util.errors import LockTimeout

DEFAULT_LOCK_TIMEOUT = 30.0


def lock_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextlib.contextmanager
def exclusive_lock(path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT, poll_interval: float = 0.05) -> Iterator[None]:
    """
    Holds `<path>.lock` for the duration of the block. Every read-modify-write of a shared
    file in the root directory goes through here so concurrent writers can't drop each other's changes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path_for(path))
    try:
        lock.acquire(timeout=timeout, poll_interval=poll_interval)
    except Timeout as e:
        raise LockTimeout(f"timed out after {timeout}s waiting for lock", lock_path_for(path)) from e
    try:
        yield
    finally:
        lock.release()
