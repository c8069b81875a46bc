#
# bup.py
# Minecraft Backup Script
#
# Drives bup against one monthly repository: init on first use, index + save for each snapshot, delete when expired.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""bup repository driver."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import BackupToolError
from .fs_utils import make_dirs, path_exists, remove_tree
from .process import CommandResult, ProcessRunner, SubprocessRunner


class BupRepository:
    def __init__(
        self,
        path: Path,
        runner: Optional[ProcessRunner] = None,
        bup_binary: str = "bup",
        logger: Optional[logging.Logger] = None,
    ):
        self.path = Path(path)
        self.runner = runner or SubprocessRunner()
        self.bup_binary = bup_binary
        self.log = logger or logging.getLogger("minecraft_backup")

    def _argv(self, *args: str) -> List[str]:
        return [self.bup_binary, "-d", str(self.path), *args]

    def _bup(self, *args: str) -> CommandResult:
        argv = self._argv(*args)
        self.log.debug("Running %s", " ".join(argv))
        try:
            result = self.runner.run(argv)
        except OSError as e:
            raise BackupToolError(argv, None, str(e)) from e
        if not result.ok:
            raise BackupToolError(argv, result.returncode, result.stderr)
        return result

    def exists(self) -> bool:
        return path_exists(self.path)

    def ensure_initialized(self) -> bool:
        """Create and ``bup init`` the repository if missing. Returns True when it did."""
        if self.exists():
            return False
        self.log.info("Creating bup repository %s", self.path)
        make_dirs(self.path)
        self._bup("init")
        return True

    def index(self, source_dir: Path) -> None:
        self._bup("index", str(source_dir))

    def save(self, branch: str, source_dir: Path) -> None:
        self._bup("save", "-n", branch, str(source_dir))

    def backup(self, source_dir: Path, branch: str) -> None:
        """
        Snapshot ``source_dir`` onto ``branch``. Stops at the first failing
        step; bup's own atomicity covers a save that dies half way.
        """
        self.ensure_initialized()
        self.index(source_dir)
        self.save(branch, source_dir)

    def prune(self) -> bool:
        """Delete the whole repository. No-op (``False``) if it is already gone."""
        removed = remove_tree(self.path, logger=self.log)
        if removed:
            self.log.info("Deleted bup repository %s", self.path)
        return removed


__all__ = ["BupRepository"]
