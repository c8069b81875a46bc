#
# test_fs_utils.py
# Minecraft Backup Script
#
# Covers existence checks, directory creation, and idempotent recursive removal of repository folders.
#
# Thales Matheus Mendonça Santos - November 2025
#
import os
import stat

import pytest

from minecraft_backup.errors import FilesystemError
from minecraft_backup.fs_utils import make_dirs, path_exists, remove_tree


def test_path_exists(tmp_path):
    assert path_exists(tmp_path)
    assert not path_exists(tmp_path / "missing")
    # A file used as a directory component reads as absent, not as an error.
    (tmp_path / "file").write_text("x")
    assert not path_exists(tmp_path / "file" / "child")


def test_make_dirs_creates_parents_with_mode(tmp_path):
    target = tmp_path / "a" / "b" / "minecraft-1-2024"
    make_dirs(target)
    assert target.is_dir()
    old_umask = os.umask(0)
    os.umask(old_umask)
    assert stat.S_IMODE(target.stat().st_mode) == 0o770 & ~old_umask


def test_make_dirs_wraps_os_errors(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    with pytest.raises(FilesystemError):
        make_dirs(blocker / "repo")


def test_remove_tree_is_idempotent(tmp_path):
    repo = tmp_path / "minecraft-11-2023"
    (repo / "objects" / "pack").mkdir(parents=True)
    (repo / "objects" / "pack" / "p.idx").write_text("x")

    assert remove_tree(repo) is True
    assert not repo.exists()
    # Second call finds nothing and does not raise.
    assert remove_tree(repo) is False


def test_remove_tree_missing_is_noop(tmp_path):
    assert remove_tree(tmp_path / "never-created") is False
