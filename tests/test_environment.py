"""Tests for mimiq.environment."""

from __future__ import annotations

from pathlib import Path

import pytest
from mimiq.environment import clear_cache, ensure_working_paths
from mimiq.models import WorkingPaths


class TestEnsureWorkingPaths:
    """Tests for ensure_working_paths function."""

    def test_creates_layout(self, working_paths: WorkingPaths) -> None:
        """Test root, temp and log directories are created."""
        ensure_working_paths(working_paths)

        assert working_paths.root.is_dir()
        assert working_paths.temp_dir.is_dir()
        assert working_paths.log_dir.is_dir()

    def test_idempotent_keeps_files(self, working_paths: WorkingPaths) -> None:
        """Test existing directories and their contents survive."""
        ensure_working_paths(working_paths)
        old_log = working_paths.log_dir / "20240101000000.log"
        old_log.write_text("previous run\n")

        ensure_working_paths(working_paths)

        assert old_log.read_text() == "previous run\n"

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        """Test an unusable root raises OSError."""
        root = tmp_path / ".mimiq"
        root.write_text("not a directory")

        with pytest.raises(OSError):
            ensure_working_paths(WorkingPaths.for_root(root))


class TestClearCache:
    """Tests for clear_cache function."""

    def test_removes_files_keeps_directory(self, working_paths: WorkingPaths) -> None:
        """Test temp entries go, the temp directory stays."""
        ensure_working_paths(working_paths)
        (working_paths.temp_dir / "a.mov").write_bytes(b"x")
        (working_paths.temp_dir / "palette.png").write_bytes(b"y")

        assert clear_cache(working_paths) == 2
        assert working_paths.temp_dir.is_dir()
        assert list(working_paths.temp_dir.iterdir()) == []

    def test_nested_directories(self, working_paths: WorkingPaths) -> None:
        """Test nested directories are removed recursively."""
        ensure_working_paths(working_paths)
        nested = working_paths.temp_dir / "batch" / "deeper"
        nested.mkdir(parents=True)
        (nested / "frame.png").write_bytes(b"z")

        assert clear_cache(working_paths) == 1
        assert not (working_paths.temp_dir / "batch").exists()

    def test_logs_untouched(self, working_paths: WorkingPaths) -> None:
        """Test only the temp directory is cleared."""
        ensure_working_paths(working_paths)
        log = working_paths.log_dir / "20240101000000.log"
        log.write_text("keep me")

        clear_cache(working_paths)

        assert log.exists()

    def test_repeat_is_noop(self, working_paths: WorkingPaths) -> None:
        """Test clearing twice is harmless."""
        ensure_working_paths(working_paths)
        (working_paths.temp_dir / "a.mov").write_bytes(b"x")

        assert clear_cache(working_paths) == 1
        assert clear_cache(working_paths) == 0

    def test_missing_directory(self, working_paths: WorkingPaths) -> None:
        """Test a missing temp directory is not an error."""
        assert clear_cache(working_paths) == 0
        assert not working_paths.temp_dir.exists()

    def test_symlink_target_kept(self, working_paths: WorkingPaths, tmp_path: Path) -> None:
        """Test symlinked directories are unlinked, not followed."""
        ensure_working_paths(working_paths)
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "precious.txt").write_text("keep")
        (working_paths.temp_dir / "link").symlink_to(outside, target_is_directory=True)

        assert clear_cache(working_paths) == 1
        assert (outside / "precious.txt").exists()
