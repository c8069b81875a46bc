"""Filesystem helpers for the backup repositories."""
from __future__ import annotations

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .errors import FilesystemError

REPO_DIR_MODE = 0o770


def path_exists(path: Path) -> bool:
    """
    ``True``/``False`` for present/absent. Any other stat failure (permissions,
    I/O) raises ``FilesystemError`` instead of being read as "absent".
    """
    try:
        os.stat(path)
        return True
    except FileNotFoundError:
        return False
    except NotADirectoryError:
        return False
    except OSError as e:
        raise FilesystemError(f"cannot stat {path}: {e}") from e


def make_dirs(path: Path, mode: int = REPO_DIR_MODE):
    try:
        Path(path).mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"cannot create {path}: {e}") from e


def remove_tree(path: Path, logger: Optional[logging.Logger] = None) -> bool:
    """Recursively delete ``path``. Returns ``False`` when there was nothing to delete."""
    log = logger or logging.getLogger("minecraft_backup")
    if not path_exists(path):
        return False
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        # Someone else removed it between the stat and the rmtree.
        return False
    except OSError as e:
        if e.errno == errno.ENOENT:
            return False
        raise FilesystemError(f"cannot remove {path}: {e}") from e
    log.debug("Removed %s", path)
    return True


__all__ = ["path_exists", "make_dirs", "remove_tree", "REPO_DIR_MODE"]
