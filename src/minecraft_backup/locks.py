#
# locks.py
# Minecraft Backup Script
#
# Implements a file-based lock so a slow save-all or bup run is never overlapped by the next cron tick.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""File lock utilities to avoid overlapping runs."""
from __future__ import annotations

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Optional

from .errors import FilesystemError


def acquire_lock(lock_path: Path) -> Optional[IO]:
    """Return the locked file handle, or ``None`` if another run holds the lock."""
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        f = open(lock_path, "a+")
    except OSError as e:
        raise FilesystemError(f"cannot open lock file {lock_path}: {e}") from e
    try:
        # Non-blocking exclusive lock to skip runs when another is active.
        fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        f.close()
        return None
    f.seek(0)
    f.truncate(0)
    f.write(str(os.getpid()))
    f.flush()
    return f


def release_lock(fh: IO) -> None:
    try:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    finally:
        fh.close()


@contextmanager
def run_lock(lock_path: Path) -> Iterator[bool]:
    """Yield ``True`` while holding the lock, ``False`` if it is taken."""
    fh = acquire_lock(lock_path)
    if fh is None:
        yield False
        return
    try:
        yield True
    finally:
        release_lock(fh)


__all__ = ["acquire_lock", "release_lock", "run_lock"]
