#
# session.py
# Minecraft Backup Script
#
# Injects console commands into the screen session that hosts the Minecraft server.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Command sender for a GNU screen session."""
from __future__ import annotations

import logging
from typing import Optional

from .errors import SenderError
from .process import ProcessRunner, SubprocessRunner

# screen's ``stuff`` expands the two characters ``\r`` into a carriage return,
# which is what the server console treats as "enter".
SUBMIT_MARKER = "\\r"


class ScreenSession:
    def __init__(
        self,
        name: str,
        window: str = "0",
        runner: Optional[ProcessRunner] = None,
        screen_binary: str = "screen",
        logger: Optional[logging.Logger] = None,
    ):
        self.name = name
        self.window = str(window)
        self.runner = runner or SubprocessRunner()
        self.screen_binary = screen_binary
        self.log = logger or logging.getLogger("minecraft_backup")

    def stuff_argv(self, command: str):
        return [self.screen_binary, "-S", self.name, "-p", self.window, "-X", "stuff", command + SUBMIT_MARKER]

    def send(self, command: str) -> None:
        """Type ``command`` into the session followed by enter."""
        argv = self.stuff_argv(command)
        self.log.debug("screen[%s] <- %r", self.name, command)
        try:
            result = self.runner.run(argv)
        except OSError as e:
            raise SenderError(f"cannot run {self.screen_binary}: {e}") from e
        if not result.ok:
            detail = (result.stderr or result.stdout or "").strip()
            raise SenderError(
                f"screen session {self.name!r} rejected {command!r} (exit {result.returncode})"
                + (f": {detail}" if detail else "")
            )

    def exists(self) -> bool:
        try:
            result = self.runner.run([self.screen_binary, "-ls", self.name])
        except OSError:
            return False
        # The exit status of screen -ls differs between versions; the listing
        # shows sessions as "<pid>.<name>".
        return f".{self.name}" in (result.stdout or "")


__all__ = ["ScreenSession", "SUBMIT_MARKER"]
