"""Tests for task_monitor daemon module."""

import json
import time
import signal
import threading
import pytest
from unittest.mock import patch

from task_monitor.daemon import TaskMonitorDaemon


@pytest.fixture
def daemon(config_file, tasks_dir, output_dir):
    """Create a daemon over temporary directories with a short debounce."""
    daemon = TaskMonitorDaemon(
        config_file=config_file,
        tasks_dir=tasks_dir,
        output_dir=output_dir,
        debounce_ms=20,
        use_polling=True
    )
    yield daemon
    daemon._shutdown()


def read_published(daemon):
    return json.loads(daemon.publisher.data_file.read_text())


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


class TestTaskMonitorDaemon:
    """Tests for TaskMonitorDaemon class."""

    def test_init(self, daemon, tasks_dir, output_dir, config_file):
        """Test daemon initialization."""
        assert daemon.scanner.tasks_dir == tasks_dir
        assert daemon.publisher.output_dir == output_dir
        assert daemon.config_manager.config_file == config_file
        assert daemon.archiver.archive_dir == tasks_dir / ".archive"
        assert daemon.scanner.cache is daemon.cache
        assert daemon.running is False

    def test_regenerate_publishes_snapshot(self, daemon, write_task):
        write_task("proj", "1", status="completed")
        write_task("proj", "2", blockedBy=["1"])

        snapshot = daemon.regenerate()

        assert snapshot is not None
        data = read_published(daemon)
        assert data["selectedListId"] == "proj"
        assert [t["id"] for t in data["taskLists"][0]["tasks"]] == ["1", "2"]
        assert data["projectDir"] == daemon.config_manager.config.project_dir
        assert daemon.publisher.html_file.exists()

    def test_regenerate_failure_returns_none(self, daemon, caplog):
        """Test that a failed pass is logged and does not raise."""
        with patch.object(daemon.publisher, "publish", side_effect=OSError("disk full")):
            assert daemon.regenerate() is None

        assert any("Error regenerating files" in r.message for r in caplog.records)

    def test_task_change_requests_pass(self, daemon, write_task):
        path = write_task("proj", "1")

        daemon._on_task_file_changed(str(path))

        assert daemon.scheduler.wait_idle(timeout=2.0)
        assert daemon.scheduler.pass_count == 1
        assert read_published(daemon)["taskLists"][0]["id"] == "proj"

    def test_removed_list_is_archived(self, daemon, write_task, tasks_dir):
        """Test that deleting the last task file archives the list once."""
        path = write_task("proj", "1", subject="Keep me")
        daemon.regenerate()

        path.unlink()
        daemon._on_task_file_removed(str(path), "proj")
        daemon._on_task_file_removed(str(path), "proj")
        assert daemon.scheduler.wait_idle(timeout=2.0)

        archives = list((tasks_dir / ".archive").iterdir())
        assert len(archives) == 1
        record = json.loads(archives[0].read_text())
        assert record["id"] == "proj"
        assert record["tasks"][0]["subject"] == "Keep me"

        data = read_published(daemon)
        assert data["taskLists"] == []
        assert data["selectedListId"] == ""

    def test_partial_removal_archives_previous_contents(self, daemon, write_task, tasks_dir):
        """Test that a removal archives the list as it was before the removal."""
        write_task("proj", "1")
        second = write_task("proj", "2")
        daemon.regenerate()

        second.unlink()
        daemon._on_task_file_removed(str(second), "proj")
        assert daemon.scheduler.wait_idle(timeout=2.0)

        record = json.loads(next((tasks_dir / ".archive").iterdir()).read_text())
        assert [t["id"] for t in record["tasks"]] == ["1", "2"]
        assert [t["id"] for t in read_published(daemon)["taskLists"][0]["tasks"]] == ["1"]

    def test_removal_during_pass_archives_once(self, daemon, write_task, tasks_dir):
        """Test that a removal arriving mid-scan is archived exactly once."""
        path = write_task("proj", "1", subject="Only")
        original = daemon.scanner.read_list_directory
        remover = {}

        def read_then_remove(list_dir):
            result = original(list_dir)
            if not remover:
                path.unlink()
                thread = threading.Thread(
                    target=daemon._on_task_file_removed, args=(str(path), "proj")
                )
                remover["thread"] = thread
                thread.start()
                thread.join(timeout=0.2)
                remover["waited_for_pass"] = thread.is_alive()
            return result

        with patch.object(daemon.scanner, "read_list_directory", side_effect=read_then_remove):
            daemon.regenerate()
        remover["thread"].join(timeout=2.0)
        assert remover["waited_for_pass"] is True
        assert daemon.scheduler.wait_idle(timeout=2.0)

        later = write_task("proj", "9")
        later.unlink()
        daemon._on_task_file_removed(str(later), "proj")
        assert daemon.scheduler.wait_idle(timeout=2.0)

        archives = list((tasks_dir / ".archive").iterdir())
        assert len(archives) == 1
        assert json.loads(archives[0].read_text())["tasks"][0]["subject"] == "Only"
        assert "proj" not in daemon.cache

    def test_config_api_write_triggers_one_pass(self, daemon):
        """Test that a config API write regenerates with the new settings."""
        status, _ = daemon.config_api.update_config('{"pollInterval": 3000}')
        assert status == 200

        # The watcher would see the daemon's own write; it must not count
        daemon._on_config_file_changed()

        assert daemon.scheduler.wait_idle(timeout=2.0)
        assert daemon.scheduler.pass_count == 1
        assert "polling every 3s" in daemon.publisher.html_file.read_text()

    def test_rejected_config_write_does_not_regenerate(self, daemon):
        status, _ = daemon.config_api.update_config({"agentNames": []})

        assert status == 400
        assert daemon.scheduler.is_pending() is False
        assert daemon.scheduler.pass_count == 0

    def test_external_config_edit(self, daemon, config_file, sample_config):
        """Test that an external edit reloads and regenerates."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text(json.dumps(sample_config.to_dict()))

        daemon._on_config_file_changed()

        assert daemon.scheduler.wait_idle(timeout=2.0)
        assert daemon.scheduler.pass_count == 1
        assert daemon.config_manager.config == sample_config
        assert read_published(daemon)["projectDir"] == sample_config.project_dir

    def test_start_and_shutdown(self, daemon, config_file, output_dir):
        """Test startup publishing and clean shutdown."""
        daemon.start()

        assert daemon.running is True
        assert config_file.exists()
        assert (output_dir / "task-monitor-data.json").exists()
        assert (output_dir / "task-monitor.html").exists()
        assert daemon.task_watcher.is_running()
        assert daemon.config_watcher.is_running()

        daemon._shutdown()

        assert daemon.running is False
        assert daemon.shutdown_requested is True
        assert not daemon.task_watcher.is_running()
        assert not daemon.config_watcher.is_running()

    def test_start_creates_tasks_dir(self, config_file, temp_dir, output_dir):
        tasks_dir = temp_dir / "new-tasks"
        daemon = TaskMonitorDaemon(config_file, tasks_dir, output_dir, debounce_ms=20, use_polling=True)
        try:
            daemon.start()
            assert tasks_dir.is_dir()
        finally:
            daemon._shutdown()

    def test_watched_change_is_published(self, daemon, write_task):
        """Test the full path from a file write to the published snapshot."""
        daemon.start()

        write_task("proj", "1", subject="Watched")

        assert wait_for(lambda: read_published(daemon)["taskLists"] != [])
        assert read_published(daemon)["taskLists"][0]["tasks"][0]["subject"] == "Watched"

    def test_signal_handler(self, daemon):
        """Test that a signal requests shutdown."""
        daemon._signal_handler(signal.SIGTERM, None)

        assert daemon.shutdown_requested is True
        assert daemon._stop_event.is_set()

    def test_run_exits_on_shutdown_request(self, daemon):
        """Test that run() returns once shutdown was requested."""
        daemon.shutdown_requested = True

        with patch("task_monitor.daemon.signal.signal"):
            daemon.run()

        assert daemon.running is False
