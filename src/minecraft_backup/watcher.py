#
# watcher.py
# Minecraft Backup Script
#
# Tails the server log from its current end in a background thread and reports the first line containing a pattern.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Log watcher used to confirm that console commands took effect.

A watcher owns one ``tail -n 0 -F`` process and one reader thread. The
reader publishes exactly one ``WatchResult`` into a single-slot queue (first
writer wins). Callers that give up must call ``cancel()``, which kills the
tail process so the thread ends instead of outliving its caller.
"""
from __future__ import annotations

import logging
import queue
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import WatcherError
from .process import ProcessRunner, RunningProcess, SubprocessRunner, close_stream


class VerificationOutcome(Enum):
    MATCHED = "matched"
    TIMED_OUT = "timed_out"
    WATCHER_ERROR = "watcher_error"


@dataclass(frozen=True)
class WatchResult:
    outcome: VerificationOutcome
    line: Optional[str] = None
    error: Optional[WatcherError] = None


class LogWatcher:
    def __init__(
        self,
        log_path: Path,
        pattern: str,
        runner: Optional[ProcessRunner] = None,
        tail_binary: str = "tail",
        logger: Optional[logging.Logger] = None,
        kill_timeout: float = 2.0,
    ):
        # A blank pattern would match the first line of any output.
        if not pattern or not pattern.strip():
            raise ValueError("LogWatcher needs a non-empty pattern")
        self.log_path = Path(log_path)
        self.pattern = pattern
        self.runner = runner or SubprocessRunner()
        self.tail_binary = tail_binary
        self.log = logger or logging.getLogger("minecraft_backup")
        self.kill_timeout = kill_timeout

        self.ready = threading.Event()
        self._result: "queue.Queue[WatchResult]" = queue.Queue(maxsize=1)
        self._cancelled = threading.Event()
        self._proc_lock = threading.Lock()
        self._proc: Optional[RunningProcess] = None
        self._thread: Optional[threading.Thread] = None

    def argv(self):
        # -n 0: skip history, -F: keep following across log rotation.
        return [self.tail_binary, "-n", "0", "-F", str(self.log_path)]

    def start(self) -> "LogWatcher":
        if self._thread is not None:
            raise RuntimeError("watcher already started")
        try:
            self._proc = self.runner.spawn(self.argv())
        except OSError as e:
            raise WatcherError(f"cannot start {self.tail_binary} on {self.log_path}: {e}") from e
        if self._proc.stdout is None:
            self._stop_process()
            raise WatcherError(f"{self.tail_binary} started without a stdout pipe")

        self._thread = threading.Thread(
            target=self._read_loop, name=f"log-watcher:{self.pattern}", daemon=True
        )
        self._thread.start()
        # tail has no "now at EOF" signal; spawned is the closest we can observe.
        self.ready.set()
        self.log.debug("Watching %s for %r", self.log_path, self.pattern)
        return self

    def wait(self, timeout: Optional[float] = None) -> Optional[WatchResult]:
        """Return the watcher's result, or ``None`` if it is still running after ``timeout``."""
        try:
            return self._result.get(timeout=timeout)
        except queue.Empty:
            return None

    def cancel(self) -> None:
        """Stop the tail process and the reader thread. Safe to call repeatedly."""
        self._cancelled.set()
        self._stop_process()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.kill_timeout)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _publish(self, result: WatchResult) -> None:
        if self._cancelled.is_set():
            return
        try:
            self._result.put_nowait(result)
        except queue.Full:
            pass

    def _read_loop(self) -> None:
        proc = self._proc
        try:
            for line in proc.stdout:
                if self.pattern in line:
                    self._publish(WatchResult(VerificationOutcome.MATCHED, line=line.rstrip("\r\n")))
                    return
            self._publish(
                WatchResult(
                    VerificationOutcome.WATCHER_ERROR,
                    error=WatcherError(f"log stream for {self.log_path} closed before {self.pattern!r} appeared"),
                )
            )
        except Exception as e:
            # Anything the stream raises becomes the watcher's terminal outcome.
            self._publish(
                WatchResult(
                    VerificationOutcome.WATCHER_ERROR,
                    error=WatcherError(f"reading {self.log_path} failed: {e}"),
                )
            )
        finally:
            self._stop_process()
            close_stream(proc.stdout)

    def _stop_process(self) -> None:
        with self._proc_lock:
            proc = self._proc
            if proc is None or proc.poll() is not None:
                return
            proc.terminate()
            try:
                proc.wait(timeout=self.kill_timeout)
            except subprocess.TimeoutExpired:
                self.log.warning("%s on %s ignored SIGTERM; killing it", self.tail_binary, self.log_path)
                proc.kill()
                proc.wait()

    def __enter__(self) -> "LogWatcher":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.cancel()


__all__ = ["LogWatcher", "VerificationOutcome", "WatchResult"]
