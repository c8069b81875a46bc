#
# verifier.py
# Minecraft Backup Script
#
# Sends a console command and confirms it through the server log, with a bounded wait.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Send-and-verify protocol.

The server has no acknowledgement channel, so a command counts as applied
only once a known line shows up in its log. The watcher is started *before*
the command is sent; otherwise a fast server could write the confirmation
before anyone is reading.

Known approximation: ``tail`` cannot tell us when it has reached the end of
the file, so after the watcher reports ``ready`` we still sleep
``grace_delay`` seconds before sending. This narrows the race, it does not
close it. Server latency for these commands is far above the delay.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .config import BackupConfig
from .errors import VerificationTimeout, WatcherError
from .process import ProcessRunner
from .session import ScreenSession
from .watcher import LogWatcher, VerificationOutcome

WatcherFactory = Callable[[str], LogWatcher]


class CommandVerifier:
    def __init__(
        self,
        sender: ScreenSession,
        watcher_factory: WatcherFactory,
        timeout: float = 10.0,
        grace_delay: float = 0.25,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sender = sender
        self.watcher_factory = watcher_factory
        self.timeout = timeout
        self.grace_delay = grace_delay
        self.log = logger or logging.getLogger("minecraft_backup")
        self.sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: BackupConfig,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "CommandVerifier":
        s = config.settings
        sender = ScreenSession(
            s.screen_session,
            window=s.screen_window,
            runner=runner,
            screen_binary=s.screen_binary,
            logger=logger,
        )

        def make_watcher(pattern: str) -> LogWatcher:
            return LogWatcher(
                config.paths.server_log,
                pattern,
                runner=runner,
                tail_binary=s.tail_binary,
                logger=logger,
            )

        return cls(
            sender,
            make_watcher,
            timeout=s.verify_timeout,
            grace_delay=s.grace_delay,
            logger=logger,
        )

    def verify(self, command: str, match_pattern: str, timeout: Optional[float] = None) -> None:
        """
        Send ``command`` and wait until a log line contains ``match_pattern``.

        Returns on confirmation. Raises ``VerificationTimeout`` when nothing
        matched within ``timeout`` seconds, ``WatcherError`` when the log
        stream failed, ``SenderError`` when screen refused the command. An
        empty pattern sends without waiting.
        """
        if not match_pattern or not match_pattern.strip():
            self.sender.send(command)
            return

        limit = self.timeout if timeout is None else timeout
        watcher = self.watcher_factory(match_pattern)
        watcher.start()
        try:
            if not watcher.ready.wait(limit):
                raise WatcherError(f"log watcher for {match_pattern!r} never became ready")
            self.sleep(self.grace_delay)

            self.sender.send(command)

            result = watcher.wait(limit)
            outcome = result.outcome if result is not None else VerificationOutcome.TIMED_OUT
            self.log.debug("%r -> %s", command, outcome.value)
            if outcome is VerificationOutcome.TIMED_OUT:
                raise VerificationTimeout(command, match_pattern, limit)
            if outcome is VerificationOutcome.WATCHER_ERROR:
                raise result.error
            self.log.debug("%r confirmed: %s", command, result.line)
        finally:
            watcher.cancel()

    def announce(self, message: str) -> None:
        """Broadcast ``message`` in game. Fire-and-forget."""
        self.verify(f"say {message}", "")


__all__ = ["CommandVerifier", "WatcherFactory"]
