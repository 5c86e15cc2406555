"""Tests for task_monitor reader module."""

import json

from task_monitor.models import TaskStatus
from task_monitor.reader import read_task_file


class TestReadTaskFile:
    """Tests for read_task_file."""

    def test_valid_task(self, tmp_path):
        """Test reading a well-formed task file."""
        task_file = tmp_path / "1.json"
        task_file.write_text(json.dumps({
            "id": "1", "subject": "Do it", "status": "completed"
        }))

        task = read_task_file(task_file)
        assert task is not None
        assert task.id == "1"
        assert task.status == TaskStatus.COMPLETED

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported as malformed."""
        assert read_task_file(tmp_path / "missing.json") is None

    def test_invalid_json(self, tmp_path):
        """Test that invalid JSON is reported as malformed."""
        task_file = tmp_path / "1.json"
        task_file.write_text("{not json")
        assert read_task_file(task_file) is None

    def test_empty_file(self, tmp_path):
        """Test that a half-written (empty) file is reported as malformed."""
        task_file = tmp_path / "1.json"
        task_file.write_text("")
        assert read_task_file(task_file) is None

    def test_not_an_object(self, tmp_path):
        """Test that non-object JSON is reported as malformed."""
        task_file = tmp_path / "1.json"
        task_file.write_text("[1, 2, 3]")
        assert read_task_file(task_file) is None

    def test_missing_required_fields(self, tmp_path):
        """Test that a task without subject/status is malformed."""
        task_file = tmp_path / "1.json"
        task_file.write_text(json.dumps({"id": "1"}))
        assert read_task_file(task_file) is None

    def test_invalid_utf8(self, tmp_path):
        """Test that undecodable bytes are reported as malformed."""
        task_file = tmp_path / "1.json"
        task_file.write_bytes(b"\xff\xfe\x00")
        assert read_task_file(task_file) is None

    def test_directory_path(self, tmp_path):
        """Test that a directory is reported as malformed."""
        directory = tmp_path / "dir.json"
        directory.mkdir()
        assert read_task_file(directory) is None
