"""Test fixtures for task-monitor tests."""

import os
import json
import pytest
import tempfile
import shutil
from pathlib import Path

from task_monitor.models import MonitorConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def tasks_dir(temp_dir):
    """Create an empty tasks root."""
    path = temp_dir / "tasks"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(temp_dir):
    """Directory receiving published artifacts."""
    return temp_dir / "output"


@pytest.fixture
def config_file(temp_dir):
    """Path to a (not yet existing) config file."""
    return temp_dir / "data" / "monitor-config.json"


@pytest.fixture
def write_task(tasks_dir):
    """
    Write a task file into a task list directory.

    Returns a function (list_id, task_id, mtime=None, **fields) -> Path.
    """
    def _write(list_id, task_id, mtime=None, filename=None, **fields):
        list_dir = tasks_dir / list_id
        list_dir.mkdir(exist_ok=True)

        data = {
            "id": task_id,
            "subject": f"Task {task_id}",
            "description": "",
            "status": "pending",
            "blocks": [],
            "blockedBy": [],
        }
        data.update(fields)

        task_file = list_dir / (filename or f"{task_id}.json")
        task_file.write_text(json.dumps(data))

        if mtime is not None:
            os.utime(task_file, (mtime, mtime))

        return task_file

    return _write


@pytest.fixture
def sample_config(temp_dir):
    """Create a sample MonitorConfig."""
    return MonitorConfig(
        project_dir=str(temp_dir / "project"),
        poll_interval=2500,
        agent_names=["alpha", "beta"]
    )
