#
# naming.py
# Minecraft Backup Script
#
# Builds the monthly bup repository paths: the one receiving today's snapshot and the one that just left the retention window.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Repository naming and rotation."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import BackupConfig
from .dates import DateLike, months_before, today


def repo_dir_name(prefix: str, year: int, month: int) -> str:
    # Month is not zero-padded: minecraft-3-2024, minecraft-11-2023.
    return f"{prefix}-{month}-{year}"


def repo_path_for(config: BackupConfig, year: int, month: int) -> Path:
    return config.paths.backup_root / repo_dir_name(config.settings.repo_prefix, year, month)


def current_repo_path(config: BackupConfig, now: Optional[DateLike] = None) -> Path:
    """Repository that receives snapshots taken during ``now``'s month."""
    ref = today(now)
    return repo_path_for(config, ref.year, ref.month)


def expired_repo_path(config: BackupConfig, now: Optional[DateLike] = None) -> Path:
    """
    Repository exactly ``retention_months`` old, due for deletion.

    Only that single month is targeted. A repository whose deletion month
    passed without a run is left alone.
    """
    year, month = months_before(today(now), config.settings.retention_months)
    return repo_path_for(config, year, month)


__all__ = ["repo_dir_name", "repo_path_for", "current_repo_path", "expired_repo_path"]
