#!/usr/bin/env python3
#
# minecraft_backup_run.py
# Minecraft Backup Script
#
# Entry-point wrapper that sets up config/logging and runs a single backup cycle; meant to be called from cron.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""
Thin wrapper around ``minecraft_backup.run_once``.

Exit status is 0 for every completed run, including runs skipped because the
server did not answer and runs that hit an unexpected error (it is logged).
Only startup failures exit with 1: a log file that cannot be opened, or an
MCBK_* value that cannot be parsed, which leaves no log to open.
"""
from __future__ import annotations

import sys

from minecraft_backup.config import BackupConfig
from minecraft_backup.errors import StartupError
from minecraft_backup.logging_setup import setup_logging
from minecraft_backup.runner import run_once


def main() -> int:
    try:
        # Defaults can be overridden through MCBK_* environment variables.
        config = BackupConfig.from_env()
    except ValueError as e:
        # Without a valid config there is no log file to report into.
        print(f"ERROR READING CONFIGURATION: {e}", file=sys.stderr)
        return 1
    try:
        logger = setup_logging(config)
    except StartupError as e:
        print(f"ERROR OPENING LOG FILE: {e}", file=sys.stderr)
        return 1
    try:
        # Handled failures only reach the log; see RunReport for details.
        run_once(config=config, logger=logger)
    except Exception:
        # Past startup, every failure is reported through the log only.
        logger.exception("[FATAL] unexpected error")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
