"""
Task file reader.

Parses a single task JSON file. Never raises: anything that cannot be turned
into a Task is reported as None so one bad file cannot break a scan.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from task_monitor.models import Task


logger = logging.getLogger(__name__)


def read_task_file(file_path: Path) -> Optional[Task]:
    """
    Read and parse a task file.

    Args:
        file_path: Path to a task JSON file

    Returns:
        Parsed Task, or None if the file is unreadable or malformed
    """
    try:
        content = Path(file_path).read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Skipping unreadable task file {file_path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.debug(f"Skipping task file {file_path}: not a JSON object")
        return None

    try:
        return Task.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Skipping malformed task file {file_path}: {e.error_count()} errors")
        return None
