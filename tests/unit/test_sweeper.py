"""Tests for smartrestore.core.sweeper - periodic cleanup of stale files.

Time is simulated: files get explicit mtimes via ``os.utime`` and the sweeper
receives a fixed clock, so no test waits for real time to pass.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from smartrestore.core.file_store import FileStore
from smartrestore.core.sweeper import FileSweeper, PeriodicSweep

NOW = 1_700_000_000.0
HOUR = 3600


def _file(store: FileStore, name: str, modified_at: float) -> Path:
    path = store.write(name, b"data")
    os.utime(path, (modified_at, modified_at))
    return path


class TestFileSweeper:
    """Tests for FileSweeper.sweep."""

    def test_removes_only_files_older_than_threshold(self, uploads_store, results_store):
        old_upload = _file(uploads_store, "upload-old.png", NOW - HOUR - 1)
        new_upload = _file(uploads_store, "upload-new.png", NOW - 60)
        old_result = _file(results_store, "restored-old.png", NOW - 2 * HOUR)
        new_result = _file(results_store, "restored-new.png", NOW - HOUR + 60)
        sweeper = FileSweeper([uploads_store, results_store], HOUR, clock=lambda: NOW)

        deleted = sweeper.sweep()

        assert sorted(deleted) == sorted([old_upload, old_result])
        assert not old_upload.exists()
        assert not old_result.exists()
        assert new_upload.exists()
        assert new_result.exists()

    def test_second_sweep_is_a_noop(self, uploads_store):
        _file(uploads_store, "upload-old.png", NOW - 2 * HOUR)
        keep = _file(uploads_store, "upload-new.png", NOW)
        sweeper = FileSweeper([uploads_store], HOUR, clock=lambda: NOW)

        assert len(sweeper.sweep()) == 1
        assert sweeper.sweep() == []
        assert keep.exists()

    def test_simulated_time_passing(self, uploads_store):
        path = _file(uploads_store, "upload-a.png", NOW)
        clock = MagicMock(return_value=NOW + 30 * 60)
        sweeper = FileSweeper([uploads_store], HOUR, clock=clock)

        assert sweeper.sweep() == []

        clock.return_value = NOW + HOUR + 1
        assert sweeper.sweep() == [path]

    def test_missing_store_directory_is_ignored(self, temp_dir):
        sweeper = FileSweeper([FileStore(temp_dir / "never-created")], HOUR, clock=lambda: NOW)
        assert sweeper.sweep() == []

    def test_delete_failure_is_logged_and_skipped(self, uploads_store, results_store, caplog):
        stuck = _file(uploads_store, "upload-stuck.png", NOW - 2 * HOUR)
        old_result = _file(results_store, "restored-old.png", NOW - 2 * HOUR)
        sweeper = FileSweeper([uploads_store, results_store], HOUR, clock=lambda: NOW)

        with patch.object(uploads_store, "delete", side_effect=PermissionError("locked")):
            deleted = sweeper.sweep()

        assert deleted == [old_result]
        assert stuck.exists()
        assert "Could not delete old file" in caplog.text

    def test_file_vanishing_mid_sweep_is_ignored(self, uploads_store):
        path = _file(uploads_store, "upload-racy.png", NOW - 2 * HOUR)
        sweeper = FileSweeper([uploads_store], HOUR, clock=lambda: NOW)
        real_entries = uploads_store.entries

        def entries_then_race():
            listed = real_entries()
            path.unlink()
            return listed

        with patch.object(uploads_store, "entries", side_effect=entries_then_race):
            assert sweeper.sweep() == []


class TestPeriodicSweep:
    """Tests for PeriodicSweep."""

    def test_runs_once_per_interval(self):
        sweeper = MagicMock(spec=FileSweeper)
        sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        asyncio.run(PeriodicSweep(sweeper, 3600, sleep=fake_sleep).run(iterations=3))

        assert sleeps == [3600, 3600, 3600]
        assert sweeper.sweep.call_count == 3

    def test_failed_sweep_does_not_stop_the_loop(self, caplog):
        sweeper = MagicMock(spec=FileSweeper)
        sweeper.sweep.side_effect = [RuntimeError("boom"), []]

        async def fake_sleep(seconds: float) -> None:
            return None

        asyncio.run(PeriodicSweep(sweeper, 10, sleep=fake_sleep).run(iterations=2))

        assert sweeper.sweep.call_count == 2
        assert "Error during cleanup" in caplog.text

    def test_start_and_stop(self):
        sweeper = MagicMock(spec=FileSweeper)

        async def scenario() -> tuple[bool, bool]:
            periodic = PeriodicSweep(sweeper, 3600)
            periodic.start()
            started = periodic.running
            await periodic.stop()
            return started, periodic.running

        started, running_after_stop = asyncio.run(scenario())

        assert started is True
        assert running_after_stop is False
        sweeper.sweep.assert_not_called()

    @pytest.mark.parametrize("calls", [1, 2])
    def test_stop_without_start_is_safe(self, calls):
        periodic = PeriodicSweep(MagicMock(spec=FileSweeper), 3600)

        async def scenario() -> None:
            for _ in range(calls):
                await periodic.stop()

        asyncio.run(scenario())
        assert periodic.running is False
