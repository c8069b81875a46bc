#
# errors.py
# Minecraft Backup Script
#
# Exception hierarchy shared by the sender, watcher, verifier, bup driver and run controller.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Error taxonomy for the backup job."""
from __future__ import annotations

from typing import Optional, Sequence


class BackupError(Exception):
    """Base class for every failure the run controller knows how to handle."""


class StartupError(BackupError):
    """The job's own log file could not be opened; nothing else can run."""


class LivenessError(BackupError):
    """The server did not answer the liveness check."""


class VerificationTimeout(BackupError):
    def __init__(self, command: str, pattern: str, timeout: float):
        self.command = command
        self.pattern = pattern
        self.timeout = timeout
        super().__init__(
            f"Command verification timeout: {command!r} not confirmed by {pattern!r} within {timeout:g}s"
        )


class SenderError(BackupError):
    """The command could not be delivered to the screen session."""


class WatcherError(BackupError):
    """The server log stream failed or closed before a match."""


class BackupToolError(BackupError):
    def __init__(self, argv: Sequence[str], returncode: Optional[int], stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"{' '.join(self.argv)} failed (exit {returncode}){detail}")


class FilesystemError(BackupError):
    """mkdir/stat/remove on a repository path failed."""


__all__ = [
    "BackupError",
    "StartupError",
    "LivenessError",
    "VerificationTimeout",
    "SenderError",
    "WatcherError",
    "BackupToolError",
    "FilesystemError",
]
