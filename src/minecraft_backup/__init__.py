#
# __init__.py
# Minecraft Backup Script
#
# Package initializer exporting the core config dataclass and the single-run entry point for the Minecraft backup job.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Minecraft world backup automation package."""
from .config import BackupConfig, DEFAULT_CONFIG
from .runner import RunPhase, RunReport, run_once

__all__ = ["BackupConfig", "DEFAULT_CONFIG", "RunPhase", "RunReport", "run_once"]
