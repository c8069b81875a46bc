#
# runner.py
# Minecraft Backup Script
#
# Coordinates one full backup cycle: liveness check, save-off, save-all, bup snapshot, save-on, and pruning of the expired repository.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Run a single backup cycle."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .bup import BupRepository
from .config import BackupConfig, DEFAULT_CONFIG
from .errors import BackupError, FilesystemError, LivenessError
from .locks import run_lock
from .logging_setup import setup_logging
from .naming import current_repo_path, expired_repo_path
from .process import ProcessRunner
from .verifier import CommandVerifier

SAVE_OFF = ("save-off", "Turned off world auto-saving")
SAVE_ALL = ("save-all", "Saved the world")
SAVE_ON = ("save-on", "Turned on world auto-saving")


class RunPhase(Enum):
    IDLE = "idle"
    LIVENESS_CHECK = "liveness_check"
    SAVING_DISABLED = "saving_disabled"
    SAVED = "saved"
    BACKED_UP = "backed_up"
    SAVING_REENABLED = "saving_reenabled"
    PRUNED = "pruned"


@dataclass
class RunReport:
    """What a run got through. ``errors`` is keyed by the phase that failed."""

    phases: List[RunPhase] = field(default_factory=lambda: [RunPhase.IDLE])
    errors: Dict[RunPhase, BackupError] = field(default_factory=dict)
    skipped: Optional[str] = None
    repo_path: Optional[Path] = None
    pruned_path: Optional[Path] = None

    def reached(self, phase: RunPhase) -> bool:
        return phase in self.phases

    @property
    def backed_up(self) -> bool:
        return self.reached(RunPhase.BACKED_UP)


class RunController:
    def __init__(
        self,
        config: BackupConfig,
        verifier: CommandVerifier,
        logger: Optional[logging.Logger] = None,
        runner: Optional[ProcessRunner] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.verifier = verifier
        self.log = logger or logging.getLogger("minecraft_backup")
        self.runner = runner
        self.clock = clock or datetime.now

    def repository(self, path: Path) -> BupRepository:
        return BupRepository(path, runner=self.runner, bup_binary=self.config.settings.bup_binary, logger=self.log)

    def run(self) -> RunReport:
        report = RunReport()
        try:
            with run_lock(self.config.paths.lockfile_path) as held:
                if not held:
                    self.log.info("Previous backup still running; skipping this one.")
                    report.skipped = "locked"
                    return report
                self._cycle(report)
        except FilesystemError as e:
            self.log.error("Cannot take run lock %s: %s", self.config.paths.lockfile_path, e)
            report.skipped = "lock_error"
        return report

    def _step(self, report: RunReport, phase: RunPhase, action: Callable[[], None], failure: str) -> bool:
        try:
            action()
        except BackupError as e:
            self.log.error("[%s] %s: %s", phase.value, failure, e)
            report.errors[phase] = e
            return False
        report.phases.append(phase)
        return True

    def _cycle(self, report: RunReport) -> None:
        s = self.config.settings

        if s.liveness_command and not self._check_liveness(report):
            report.skipped = "unresponsive"
            return

        self._announce(s.announce_start)
        try:
            self.log.info("Turning off world auto-saving...")
            ok = self._step(report, RunPhase.SAVING_DISABLED, lambda: self.verifier.verify(*SAVE_OFF),
                            "Error turning off world saving")
            if ok:
                self.log.info("Saving minecraft world...")
                ok = self._step(report, RunPhase.SAVED, lambda: self.verifier.verify(*SAVE_ALL),
                                "Error saving world")
            if ok:
                ok = self._step(report, RunPhase.BACKED_UP, lambda: self._backup(report),
                                "Error saving backup")
            if ok:
                self._announce(s.announce_done)
        finally:
            # Auto-saving must come back on whatever happened above.
            self.log.info("Turning world auto-saving back on...")
            self._step(report, RunPhase.SAVING_REENABLED, lambda: self.verifier.verify(*SAVE_ON),
                       "Error turning world saving back on")

        if report.backed_up:
            self.log.info("Pruning old backups...")
            self._step(report, RunPhase.PRUNED, lambda: self._prune(report), "Error pruning old backups")

        self.log.info(
            "Run finished: backed_up=%s phases=%s",
            report.backed_up,
            ",".join(p.value for p in report.phases),
        )

    def _check_liveness(self, report: RunReport) -> bool:
        s = self.config.settings
        try:
            self.verifier.verify(s.liveness_command, s.liveness_pattern)
        except BackupError as e:
            err = LivenessError(f"server did not answer {s.liveness_command!r}: {e}")
            err.__cause__ = e
            report.errors[RunPhase.LIVENESS_CHECK] = err
            self.log.info("Server unresponsive, nothing to back up (%s)", e)
            if not self.verifier.sender.exists():
                self.log.info("No screen session named %r is running", s.screen_session)
            return False
        report.phases.append(RunPhase.LIVENESS_CHECK)
        return True

    def _announce(self, message: str) -> None:
        if not message:
            return
        try:
            self.verifier.announce(message)
        except BackupError as e:
            self.log.warning("Could not announce %r: %s", message, e)

    def _backup(self, report: RunReport) -> None:
        repo = self.repository(current_repo_path(self.config, self.clock()))
        report.repo_path = repo.path
        self.log.info("Backing up %s -> %s", self.config.paths.world_dir, repo.path)
        repo.backup(self.config.paths.world_dir, self.config.settings.branch_name)
        self.log.info("Snapshot saved on branch %s", self.config.settings.branch_name)

    def _prune(self, report: RunReport) -> None:
        repo = self.repository(expired_repo_path(self.config, self.clock()))
        if repo.prune():
            report.pruned_path = repo.path
        else:
            self.log.debug("Nothing to prune at %s", repo.path)


def run_once(
    config: BackupConfig = DEFAULT_CONFIG,
    logger: Optional[logging.Logger] = None,
    runner: Optional[ProcessRunner] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> RunReport:
    log = logger or setup_logging(config)
    verifier = CommandVerifier.from_config(config, runner=runner, logger=log)
    return RunController(config, verifier, logger=log, runner=runner, clock=clock).run()


__all__ = ["RunController", "RunPhase", "RunReport", "run_once"]
