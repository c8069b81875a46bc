#
# process.py
# Minecraft Backup Script
#
# Narrow wrapper around external processes (screen, bup, tail) so the rest of the job can be tested without spawning anything.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""External process abstraction."""
from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import IO, Iterable, Optional, Protocol, Sequence


@dataclass
class CommandResult:
    """Outcome of a finished external command."""

    argv: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class RunningProcess(Protocol):
    """The subset of ``subprocess.Popen`` the log watcher relies on."""

    stdout: Optional[Iterable[str]]

    def poll(self) -> Optional[int]: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...

    def wait(self, timeout: Optional[float] = None) -> int: ...


class ProcessRunner(Protocol):
    def run(self, argv: Sequence[str]) -> CommandResult:  # pragma: no cover
        """Run ``argv`` to completion and capture its output."""

    def spawn(self, argv: Sequence[str]) -> RunningProcess:  # pragma: no cover
        """Start ``argv`` with a line-buffered text stdout pipe."""


class SubprocessRunner:
    """``ProcessRunner`` backed by the ``subprocess`` module.

    Output is decoded as UTF-8 with undecodable bytes replaced, so a stray
    Latin-1 chat line cannot break matching. Spawn failures (missing binary,
    permissions) surface as ``OSError``; callers translate them into their own error types.
    """

    def run(self, argv: Sequence[str]) -> CommandResult:
        proc = subprocess.run(
            list(argv),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        return CommandResult(argv=list(argv), returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def spawn(self, argv: Sequence[str]) -> subprocess.Popen:
        return subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )


def close_stream(stream: Optional[IO]) -> None:
    if stream is None:
        return
    try:
        stream.close()
    except (OSError, ValueError):
        pass


__all__ = ["CommandResult", "ProcessRunner", "RunningProcess", "SubprocessRunner", "close_stream"]
