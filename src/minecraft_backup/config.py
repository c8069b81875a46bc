#
# config.py
# Minecraft Backup Script
#
# Defines dataclasses for filesystem paths and runtime settings so backups can be configured and reused consistently across runs and tests.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Configuration objects for the Minecraft backup job.

The defaults mirror the constants of the original shell-driven setup. A
BackupConfig bundles filesystem paths and runtime settings, making it easy to
reuse with alternative roots during testing. ``BackupConfig.from_env`` lets a
cron entry override any of them through ``MCBK_*`` variables.
"""
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "MCBK_"


@dataclass
class Settings:
    repo_prefix: str = "minecraft"  # repositories are named <prefix>-<month>-<year>
    branch_name: str = "minecraft_server"
    screen_session: str = "minecraft"
    screen_window: str = "0"
    verify_timeout: float = 10.0  # seconds; large worlds may need more for save-all
    grace_delay: float = 0.25  # seconds between starting the watcher and sending
    retention_months: int = 2
    liveness_command: str = "list"  # empty string disables the liveness check
    liveness_pattern: str = "players online"
    announce_start: str = "Backing up world..."
    announce_done: str = "Backup complete"
    screen_binary: str = "screen"
    bup_binary: str = "bup"
    tail_binary: str = "tail"
    log_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_backup_count: int = 5


@dataclass
class Paths:
    backup_root: Path = Path("/srv/minecraft-backups")
    world_dir: Path = Path("/srv/minecraft/world")
    server_log: Path = Path("/srv/minecraft/logs/latest.log")
    log_file: Optional[Path] = None

    def __post_init__(self):
        # Normalize inputs to Path objects even when callers pass strings.
        self.backup_root = Path(self.backup_root)
        self.world_dir = Path(self.world_dir)
        self.server_log = Path(self.server_log)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)


@dataclass
class BackupConfig:
    paths: Paths = field(default_factory=Paths)
    settings: Settings = field(default_factory=Settings)

    def __post_init__(self):
        # The job's own log and lock live next to the repositories and share
        # their prefix, which only Settings carries.
        prefix = self.settings.repo_prefix
        paths = self.paths
        if paths.log_file is None:
            paths.log_file = paths.backup_root / f"{prefix}_backup.log"
        paths.lockfile_path = paths.backup_root / f".{prefix}_backup.lock"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BackupConfig":
        """
        Build a config from ``MCBK_<FIELD>`` variables, e.g. ``MCBK_BACKUP_ROOT``
        or ``MCBK_VERIFY_TIMEOUT``. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        settings = Settings(**_overrides(Settings, env))
        paths = Paths(**_overrides(Paths, env))
        return cls(paths=paths, settings=settings)


def _overrides(klass, env: Mapping[str, str]) -> dict:
    out = {}
    for f in fields(klass):
        key = ENV_PREFIX + f.name.upper()
        if key not in env:
            continue
        raw = env[key]
        default = f.default
        # Cast according to the declared default so "10" becomes 10.0 for floats.
        if isinstance(default, (int, float)):
            try:
                out[f.name] = type(default)(raw)
            except ValueError:
                raise ValueError(f"{key}: expected {type(default).__name__}, got {raw!r}") from None
        else:
            out[f.name] = raw
    return out


DEFAULT_CONFIG = BackupConfig()
